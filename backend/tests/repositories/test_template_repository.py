import pytest

from label_designer.exceptions import PersistenceError
from label_designer.models.fields import create_field
from label_designer.models.template import Template
from label_designer.repositories import InMemoryTemplateRepository


@pytest.fixture
def payload():
    template = Template(name="Parcel", fields=[create_field("barcode", field_id="bc")])
    return template.to_payload()


@pytest.mark.asyncio
async def test_create_assigns_id(payload):
    repo = InMemoryTemplateRepository()

    template = await repo.create_template(payload)

    assert template.id is not None
    assert template.name == "Parcel"
    assert await repo.get_template(template.id) == template


@pytest.mark.asyncio
async def test_update_replaces(payload):
    repo = InMemoryTemplateRepository()
    created = await repo.create_template(payload)

    updated = await repo.update_template(created.id, {**payload, "name": "Renamed"})

    assert updated.id == created.id
    assert [t.name for t in await repo.list_templates()] == ["Renamed"]


@pytest.mark.asyncio
async def test_update_unknown(payload):
    repo = InMemoryTemplateRepository()

    with pytest.raises(PersistenceError):
        await repo.update_template("missing", payload)


@pytest.mark.asyncio
async def test_delete(payload):
    repo = InMemoryTemplateRepository()
    created = await repo.create_template(payload)

    await repo.delete_template(created.id)

    assert await repo.list_templates() == []
    assert await repo.get_template(created.id) is None


@pytest.mark.asyncio
async def test_delete_unknown():
    repo = InMemoryTemplateRepository()

    with pytest.raises(PersistenceError):
        await repo.delete_template("missing")


@pytest.mark.asyncio
async def test_duplicate(payload):
    repo = InMemoryTemplateRepository()
    created = await repo.create_template(payload)

    copy = await repo.duplicate_template(created.id)

    assert copy.id != created.id
    assert copy.name == "Parcel (Copy)"
    assert copy.fields == created.fields
    assert copy.label_size == created.label_size
    assert [t.name for t in await repo.list_templates()] == ["Parcel", "Parcel (Copy)"]


@pytest.mark.asyncio
async def test_duplicate_unknown():
    repo = InMemoryTemplateRepository()

    with pytest.raises(PersistenceError):
        await repo.duplicate_template("missing")
