"""Apply remote response payloads back onto in-memory records.

Save responses and list-shaped validation errors are matched to records by
position: index ``i`` of the payload belongs to the record that was at index
``i`` when the request body was built. Callers must keep the response in
request order. A length mismatch is reported as :class:`ResponseError`; a
reordered response cannot be detected here.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from logging import getLogger
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter, ValidationError

from .matchers import matches

if TYPE_CHECKING:
    from modelsync.domain.model import Identifier, Record

    from .collection import Collection
    from .matchers import Matcher

log = getLogger(__name__)

_RECORD_LIST = TypeAdapter(list[dict[str, Any]])
_ERROR_MAP = TypeAdapter(dict[str, list[str] | str])


class ResponseError(ValueError):
    """Raised when a response payload does not have the shape its action requires."""


def _is_empty(payload: object) -> bool:
    return payload is None or payload == "" or (
        isinstance(payload, (Sequence, Mapping)) and not isinstance(payload, str) and not payload
    )


def parse_record_list(payload: object, *, action: str) -> list[dict[str, Any]]:
    if _is_empty(payload):
        return []
    try:
        return _RECORD_LIST.validate_python(payload)
    except ValidationError as exc:
        raise ResponseError(f"Expected a list of records in the {action} response") from exc


def parse_error_map(payload: object) -> dict[str, list[str]]:
    try:
        errors = _ERROR_MAP.validate_python(payload)
    except ValidationError as exc:
        raise ResponseError("Expected a mapping of attribute names to error messages") from exc
    return {
        name: [messages] if isinstance(messages, str) else messages
        for name, messages in errors.items()
    }


def apply_fetch(collection: Collection, payload: object) -> None:
    records = parse_record_list(payload, action="fetch")
    pagination = collection.pagination

    if not pagination.enabled:
        collection.replace(records)
        log.info("Fetched %d records", len(records))
        return

    first_page = pagination.page == 1
    if not records:
        if first_page:
            collection.replace([])
        pagination.mark_last_page()
        log.info("Reached last page at page %s", pagination.page)
        return

    if first_page:
        collection.replace(records)
    else:
        collection.add(records)
    log.info("Fetched %d records from page %s", len(records), pagination.page)
    pagination.advance()


def build_save_body(snapshot: Sequence[Record]) -> list[object]:
    return [record.save_body() for record in snapshot]


def apply_save(snapshot: Sequence[Record], payload: object) -> None:
    """Merge a positional save response into the request-time records."""

    items = parse_record_list(payload, action="save")
    if not items:
        for record in snapshot:
            record.clear_errors()
        log.info("Saved %d records without attribute changes", len(snapshot))
        return

    if len(items) != len(snapshot):
        raise ResponseError(
            f"Save response has {len(items)} records but {len(snapshot)} were sent"
        )

    for record, attributes in zip(snapshot, items, strict=True):
        record.assign(attributes)
        record.clear_errors()
    log.info("Saved %d records", len(snapshot))


def apply_validation_errors(snapshot: Sequence[Record], payload: object) -> None:
    """Distribute validation errors to the records they address.

    ``payload`` is either a list of error maps in request order, or a mapping of
    record identifier to error map. Records not addressed end up without errors.
    """

    if payload is None:
        return

    if isinstance(payload, Mapping):
        keyed = {str(key): parse_error_map(errors) for key, errors in payload.items()}
        for record in snapshot:
            record.clear_errors()
        for key, errors in keyed.items():
            record = _find_by_identifier(snapshot, key)
            if record is None:
                log.warning("Validation errors for unknown record %r ignored", key)
                continue
            record.set_errors(errors)
        return

    if isinstance(payload, Sequence) and not isinstance(payload, str):
        positional = [parse_error_map(errors) for errors in payload]
        if len(positional) != len(snapshot):
            raise ResponseError(
                f"Validation response has {len(positional)} entries "
                f"but {len(snapshot)} records were sent"
            )
        for record, errors in zip(snapshot, positional, strict=True):
            if errors:
                record.set_errors(errors)
            else:
                record.clear_errors()
        return

    raise ResponseError("Validation errors must be a list or a mapping keyed by identifier")


def _find_by_identifier(snapshot: Sequence[Record], key: str) -> Record | None:
    for record in snapshot:
        identifier = record.identifier
        if identifier is not None and str(identifier) == key:
            return record
    return None


def delete_targets(records: Sequence[Record], matcher: Matcher | None = None) -> list[Record]:
    """Records that can be addressed remotely, i.e. those with an identifier."""

    return [
        record
        for record in records
        if record.identifier is not None and (matcher is None or matches(matcher, record))
    ]


def collect_identifiers(targets: Sequence[Record]) -> list[Identifier]:
    return [record.identifier for record in targets if record.identifier is not None]


def apply_delete(collection: Collection, targets: Sequence[Record]) -> None:
    present = [record for record in targets if collection.contains(record)]
    collection.remove(present)
    log.info("Deleted %d records", len(present))
