"""Smoke test for extraction routines."""

from __future__ import annotations

from collections.abc import Mapping

from ..entities.core import ExtractionCheck, Recipe
from ..extraction.coerce import is_missing
from ..utils.logging import get_logger, recipe_scope

_LOGGER = get_logger(module=__name__)


async def test_extraction_routine(recipe: Recipe, payload: str, url: str) -> ExtractionCheck:
    """Run *recipe*'s routine and report whether it honoured the routine contract.

    Any exception raised by the routine is captured into the result.  The
    routine must return a mapping whose values are never absent markers.
    """

    with recipe_scope(recipe.identity, "smoke"):
        try:
            data = await recipe.extract(payload, url)  # type: ignore[misc]
        except Exception as exc:
            _LOGGER.warning("Extraction routine raised", url=url, error=repr(exc))
            return ExtractionCheck(success=False, error=str(exc) or type(exc).__name__)

        if not isinstance(data, Mapping):
            _LOGGER.warning("Extraction routine returned a non-mapping", url=url, result_type=type(data).__name__)
            return ExtractionCheck(success=False, error="Extract must return a mapping")

        for key, value in data.items():
            if is_missing(value):
                return ExtractionCheck(success=False, error=f"Field {key} is absent (should be omitted)")

        _LOGGER.debug("Extraction routine passed", url=url, fields=len(data))
        return ExtractionCheck(success=True, data=dict(data))


# Keep pytest from collecting the coroutine when it is imported into a test module.
test_extraction_routine.__test__ = False  # type: ignore[attr-defined]


__all__ = ["test_extraction_routine"]
