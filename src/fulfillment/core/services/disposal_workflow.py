"""
Disposal workflow.

Permanently removes disposal-eligible product quantities and damaged tools.
Product quantities left stock when they were issued and were never
restocked, so disposal does not go through the ledger. Tools can also be
parted out: disposed with the parts salvaged from them logged.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

from fulfillment.config import get_logger
from fulfillment.core.entities import (
    DisposalEligibleQuantity,
    DisposalRecord,
    DisposalSelection,
    DisposalSourceType,
    SalvagedPart,
    SalvagePart,
    Tool,
    ToolStatus,
    utc_now,
)
from fulfillment.core.exceptions import (
    DisposalSourceNotFoundError,
    InvalidStateError,
    ToolNotFoundError,
    ValidationError,
)
from fulfillment.core.interfaces import IUnitOfWork
from fulfillment.core.services.transactions import TransactionRunner, TransactionScope

logger = get_logger(__name__)


@dataclass
class DisposalItems:
    """Everything currently awaiting disposal."""

    products: list[DisposalEligibleQuantity]
    tools: list[Tool]


@dataclass
class DisposalOutcome:
    records: list[DisposalRecord] = field(default_factory=list)
    skipped: list[DisposalSelection] = field(default_factory=list)


@dataclass
class PartOutOutcome:
    records: list[DisposalRecord] = field(default_factory=list)
    parts: list[SalvagedPart] = field(default_factory=list)


class DisposalWorkflow:
    """Dispose quarantined product quantities and tools."""

    def __init__(self, runner: TransactionRunner):
        self._runner = runner

    async def list_disposal_items(self) -> DisposalItems:
        async def query(uow: IUnitOfWork) -> DisposalItems:
            products = await uow.disposals.list_eligible(include_disposed=False)
            tools = await uow.tools.list_all(include_disposed=False)
            return DisposalItems(products=products, tools=tools)

        return await self._runner.read(query)

    async def list_disposal_records(self, limit: int = 100, offset: int = 0) -> list[DisposalRecord]:
        return await self._runner.read(lambda uow: uow.disposals.list_records(limit, offset))

    async def dispose_items(
        self,
        selection: Sequence[DisposalSelection],
        reason: str,
        disposed_by: str,
    ) -> DisposalOutcome:
        """
        Dispose every selected source, or none of them.

        All sources are looked up before anything changes. Sources that are
        already disposed are skipped and reported, so a retried request
        succeeds without disposing twice.

        Raises:
            ValidationError: Empty selection or missing reason/actor
            DisposalSourceNotFoundError: Unknown disposal-eligible quantity
            ToolNotFoundError: Unknown tool
        """
        if not selection:
            raise ValidationError("selection", "Select at least one item to dispose")
        if not reason or not reason.strip():
            raise ValidationError("reason", "A disposal reason is required")
        if not disposed_by:
            raise ValidationError("disposed_by", "Disposing user is required")

        unique: dict[tuple[DisposalSourceType, str], int] = {}
        for index, entry in enumerate(selection):
            unique.setdefault((entry.source_type, entry.source_id), index)

        async def work(tx: TransactionScope) -> DisposalOutcome:
            sources: list[tuple[DisposalSelection, DisposalEligibleQuantity | Tool]] = []
            for (source_type, source_id), index in unique.items():
                entry = selection[index]
                if source_type == DisposalSourceType.PRODUCT:
                    eligible = await tx.uow.disposals.get_eligible(source_id)
                    if eligible is None:
                        raise DisposalSourceNotFoundError(source_id, line=index)
                    sources.append((entry, eligible))
                else:
                    tool = await tx.uow.tools.get(source_id)
                    if tool is None:
                        raise ToolNotFoundError(source_id, line=index)
                    sources.append((entry, tool))

            outcome = DisposalOutcome()
            now = utc_now()
            for entry, source in sources:
                if isinstance(source, DisposalEligibleQuantity):
                    if source.disposed or not await tx.uow.disposals.mark_disposed(
                        source.id, now
                    ):
                        outcome.skipped.append(entry)
                        continue
                    name = source.product_name or source.product_id
                    record = DisposalRecord(
                        source_type=DisposalSourceType.PRODUCT,
                        source_id=source.id,
                        item_name=f"{name} ({source.product_sku})" if source.product_sku else name,
                        quantity=source.quantity,
                        reason=reason,
                        disposed_by=disposed_by,
                        date=now,
                    )
                else:
                    if source.status == ToolStatus.DISPOSED:
                        outcome.skipped.append(entry)
                        continue
                    await tx.uow.tools.update(
                        source.model_copy(update={"status": ToolStatus.DISPOSED})
                    )
                    record = DisposalRecord(
                        source_type=DisposalSourceType.TOOL,
                        source_id=source.id,
                        item_name=source.name,
                        quantity=1,
                        reason=reason,
                        disposed_by=disposed_by,
                        date=now,
                    )
                outcome.records.append(await tx.uow.disposals.add_record(record))

            if outcome.records:
                tx.emit(
                    "items.disposed",
                    None,
                    count=len(outcome.records),
                    disposed_by=disposed_by,
                    reason=reason,
                )
            return outcome

        outcome = await self._runner.run("dispose_items", work)
        logger.info(
            "items_disposed",
            disposed=len(outcome.records),
            skipped=len(outcome.skipped),
            disposed_by=disposed_by,
        )
        return outcome

    async def part_out_tools(
        self,
        tool_ids: Sequence[str],
        parts: Sequence[SalvagePart],
        disposed_by: str,
        notes: str | None = None,
    ) -> PartOutOutcome:
        """
        Dispose tools for parts, logging each salvaged part against every tool.

        Raises:
            ValidationError: No tools, no parts or missing actor
            ToolNotFoundError: Unknown tool
            InvalidStateError: A tool is already disposed
        """
        if not tool_ids:
            raise ValidationError("tool_ids", "Select at least one tool to part out")
        if not parts:
            raise ValidationError("parts", "List at least one salvaged part")
        if not disposed_by:
            raise ValidationError("disposed_by", "Disposing user is required")
        tool_ids = list(dict.fromkeys(tool_ids))

        async def work(tx: TransactionScope) -> PartOutOutcome:
            tools: list[Tool] = []
            for index, tool_id in enumerate(tool_ids):
                tool = await tx.uow.tools.get(tool_id)
                if tool is None:
                    raise ToolNotFoundError(tool_id, line=index)
                if tool.status == ToolStatus.DISPOSED:
                    raise InvalidStateError(
                        "tool",
                        tool_id,
                        tool.status.value,
                        message=f"{tool.name} is already disposed",
                    )
                tools.append(tool)

            outcome = PartOutOutcome()
            now = utc_now()
            for tool in tools:
                await tx.uow.tools.update(tool.model_copy(update={"status": ToolStatus.DISPOSED}))
                outcome.records.append(
                    await tx.uow.disposals.add_record(
                        DisposalRecord(
                            source_type=DisposalSourceType.TOOL,
                            source_id=tool.id,
                            item_name=tool.name,
                            quantity=1,
                            reason="For Parts Out",
                            disposed_by=disposed_by,
                            date=now,
                        )
                    )
                )
                for part in parts:
                    outcome.parts.append(
                        await tx.uow.disposals.add_salvaged_part(
                            SalvagedPart(
                                name=part.name,
                                quantity=part.quantity,
                                condition=part.condition,
                                original_tool_id=tool.id,
                                original_tool_name=tool.name,
                                notes=notes,
                                salvage_date=now,
                            )
                        )
                    )

            tx.emit(
                "tools.parted_out",
                None,
                tool_ids=[tool.id for tool in tools],
                parts=len(outcome.parts),
                disposed_by=disposed_by,
            )
            return outcome

        outcome = await self._runner.run("part_out_tools", work)
        logger.info(
            "tools_parted_out",
            tools=len(outcome.records),
            parts=len(outcome.parts),
            disposed_by=disposed_by,
        )
        return outcome

    async def list_salvaged_parts(self, tool_id: str | None = None) -> list[SalvagedPart]:
        return await self._runner.read(lambda uow: uow.disposals.list_salvaged_parts(tool_id))
