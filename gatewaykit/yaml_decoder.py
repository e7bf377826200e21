"""Decoding of multi-document YAML files into typed objects."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import Any

import yaml

from gatewaykit.log import get_logger
from gatewaykit.resources import GroupVersionKind, parse_group_version

__all__ = ["DecodeError", "Scheme", "decode_file"]

_MAX_DOCUMENT_SIZE = 5 * 1024 * 1024
_SEPARATOR = "\n---"


class DecodeError(ValueError):
    """Raised when a document cannot be turned into a known object."""


class Scheme:
    """Registry mapping group/version/kind to a factory building objects from mappings."""

    def __init__(self) -> None:
        self._factories: dict[GroupVersionKind, Callable[[dict[str, Any]], Any]] = {}

    def register(self, gvk: GroupVersionKind, factory: Callable[[dict[str, Any]], Any]) -> None:
        """Use ``factory`` to build objects of ``gvk`` from their parsed document."""
        self._factories[gvk] = factory

    def decode(self, document: str) -> Any:
        """Parse one YAML document and build the object its apiVersion and kind name."""
        try:
            data = yaml.safe_load(document)
        except yaml.YAMLError as err:
            raise DecodeError(f"invalid YAML: {err}") from err
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise DecodeError(f"document is not a mapping: {document!r}")
        kind = data.get("kind") or ""
        api_version = data.get("apiVersion") or ""
        if not isinstance(kind, str) or not isinstance(api_version, str):
            raise DecodeError("apiVersion and kind must be strings")
        if not kind:
            raise DecodeError(f"Object 'Kind' is missing in {document!r}")
        if not api_version:
            raise DecodeError(f"Object 'apiVersion' is missing in {document!r}")
        try:
            group, version = parse_group_version(api_version)
        except ValueError as err:
            raise DecodeError(str(err)) from err
        factory = self._factories.get(GroupVersionKind(group, version, kind))
        if factory is None:
            raise DecodeError(f'no kind "{kind}" is registered for version "{api_version}" in scheme')
        return factory(data)


def _split_documents(data: str) -> Iterator[str]:
    """Yield the text between ``---`` separator lines."""
    while data:
        index = data.find(_SEPARATOR)
        if index < 0:
            yield data
            return
        after = data[index + len(_SEPARATOR):]
        if not after:
            yield data[:index]
            return
        newline = after.find("\n")
        if newline < 0:
            # an unterminated separator line at the end of input ends decoding
            return
        yield data[:index]
        data = after[newline + 1:]


def decode_file(
    file_data: bytes | str,
    scheme: Scheme,
    callback: Callable[[Any], None],
    logger: logging.Logger | None = None,
) -> None:
    """Decode every YAML document in ``file_data`` and pass each object to ``callback``.

    Empty documents are skipped. A document that cannot be decoded is logged and
    raises :class:`DecodeError`; errors raised by ``callback`` propagate unchanged.
    """
    log = logger if logger is not None else get_logger()
    text = file_data.decode("utf-8") if isinstance(file_data, bytes) else file_data

    for document in _split_documents(text):
        if len(document.encode("utf-8")) > _MAX_DOCUMENT_SIZE:
            raise DecodeError("document exceeds the maximum size of 5 MiB")
        if not document or text == "---":
            continue
        try:
            obj = scheme.decode(document)
        except DecodeError as err:
            log.info("Document decode error", extra={"fields": {"error": str(err)}})
            raise DecodeError(f"failed to decode document: {err}") from err
        callback(obj)