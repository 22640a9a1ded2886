# backend/label_designer/services/code_regenerator.py
"""
Background regeneration of barcode/QR images.

One asyncio task per field id; the encoder runs in a worker thread so
pointer handling is never blocked. Each trigger bumps the field's
generation counter: a completion whose generation is no longer current
is stale and is dropped (last trigger wins, not last completion).
"""

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from label_designer.exceptions import EncodingError
from label_designer.models.fields import BaseField
from label_designer.services.barcode_generator import GeneratedCode

logger = logging.getLogger(__name__)

CodeSource = Callable[[BaseField, Any], GeneratedCode]
SignatureSource = Callable[[BaseField, Any], tuple]


@dataclass
class CodeSlot:
    """Latest applied generation result of one field."""

    signature: tuple
    generation: int
    result: GeneratedCode | None = None
    error: EncodingError | None = None


class CodeRegenerator:
    """Cancellable per-field code generation."""

    def __init__(self, generate: CodeSource, signature: SignatureSource):
        """
        Args:
            generate: Produces the image of a field (may raise EncodingError)
            signature: Everything the image depends on; equal signatures are not regenerated
        """
        self._generate = generate
        self._signature = signature
        self.slots: dict[str, CodeSlot] = {}
        self._generations: dict[str, int] = {}
        self._tasks: dict[str, asyncio.Task] = {}
        self._scheduled: dict[str, tuple] = {}

    @property
    def pending(self) -> set[str]:
        """Field ids with generation in flight."""
        return {field_id for field_id, task in self._tasks.items() if not task.done()}

    def generation(self, field_id: str) -> int:
        return self._generations.get(field_id, 0)

    def refresh(self, fields: Iterable[BaseField], record: Any = None) -> list[str]:
        """
        Schedules regeneration for enabled code fields whose inputs changed
        and forgets fields that are gone or disabled.

        Must be called from a running event loop.

        Returns:
            Ids of the fields scheduled
        """
        active = {field.id: field for field in fields if field.enabled and field.field_type.is_code}

        for field_id in list(self._scheduled):
            if field_id not in active:
                self.discard(field_id)

        scheduled: list[str] = []
        for field_id, field in active.items():
            signature = self._signature(field, record)
            if self._scheduled.get(field_id) == signature:
                continue
            self.schedule(field, record, signature)
            scheduled.append(field_id)
        return scheduled

    def schedule(
        self,
        field: BaseField,
        record: Any = None,
        signature: tuple | None = None,
    ) -> asyncio.Task:
        """Starts generation for a field, superseding any previous run."""
        if signature is None:
            signature = self._signature(field, record)

        generation = self.generation(field.id) + 1
        self._generations[field.id] = generation
        self._scheduled[field.id] = signature

        previous = self._tasks.get(field.id)
        if previous is not None and not previous.done():
            previous.cancel()

        task = asyncio.get_running_loop().create_task(
            self._run(field, record, signature, generation),
            name=f"code-{field.id}-{generation}",
        )
        self._tasks[field.id] = task
        return task

    async def _run(self, field: BaseField, record: Any, signature: tuple, generation: int) -> None:
        result: GeneratedCode | None = None
        error: EncodingError | None = None
        try:
            result = await asyncio.to_thread(self._generate, field, record)
        except EncodingError as e:
            error = e

        if self.generation(field.id) != generation:
            logger.debug(f"Discarded stale code for field {field.id} (generation {generation})")
            return

        self.slots[field.id] = CodeSlot(
            signature=signature,
            generation=generation,
            result=result,
            error=error,
        )
        if error is not None:
            logger.warning(
                f"Code generation failed for field {field.id}: {error}",
                extra={"field_id": field.id, "symbology": error.symbology},
            )
        else:
            logger.debug(f"Code regenerated for field {field.id} (generation {generation})")

    def discard(self, field_id: str) -> None:
        """Cancels a field's generation and drops its slot."""
        self._generations[field_id] = self.generation(field_id) + 1
        task = self._tasks.pop(field_id, None)
        if task is not None and not task.done():
            task.cancel()
        self._scheduled.pop(field_id, None)
        self.slots.pop(field_id, None)

    def cancel_all(self, clear_slots: bool = True) -> None:
        """
        Cancels all in-flight generation (mode switch, unmount, template load).

        In-flight results can no longer be applied afterwards.
        """
        for field_id in set(self._generations) | set(self._tasks):
            self._generations[field_id] = self.generation(field_id) + 1
        for task in self._tasks.values():
            if not task.done():
                task.cancel()
        self._tasks.clear()
        self._scheduled.clear()
        if clear_slots:
            self.slots.clear()

    async def wait(self) -> None:
        """Waits for all in-flight generation to settle."""
        tasks = [task for task in self._tasks.values() if not task.done()]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
