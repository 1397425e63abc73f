"""Building instruments from normalized details responses."""

from __future__ import annotations

import logging

from trportfolio.portfolio.instrument import (
    Instrument,
    NoMatchError,
    TypeResolver,
    extract_isin_from_icon,
)
from trportfolio.timeline.details import (
    OVERVIEW_DATA_TITLE_ASSET,
    OVERVIEW_DATA_TITLE_SECURITY,
    OVERVIEW_DATA_TITLE_UNDERLYING_ASSET,
    NormalizedResponse,
    SectionDataTitleNotFound,
)

logger = logging.getLogger(__name__)


class InsufficientDataError(ValueError):
    """The response lacks data needed to build the instrument."""


class InstrumentBuilder:
    """Builds the instrument a transaction refers to."""

    def __init__(self, type_resolver: TypeResolver | None = None) -> None:
        self._type_resolver = type_resolver if type_resolver is not None else TypeResolver()

    def build(self, response: NormalizedResponse) -> Instrument:
        """Build the instrument; missing parts are left empty."""
        try:
            name = self.extract_name(response)
        except SectionDataTitleNotFound as error:
            logger.debug("no instrument name for %s: %s", response.id, error)
            name = ""

        instrument = Instrument(
            isin=self.extract_isin(response),
            name=name,
            icon=self.extract_icon(response),
        )
        instrument.type = self._type_resolver.resolve(instrument)
        return instrument

    def extract_isin(self, response: NormalizedResponse) -> str:
        """Take the ISIN from the header action, else from the header icon."""
        payload = response.header.action.payload
        if isinstance(payload, str) and payload:
            return payload
        try:
            return extract_isin_from_icon(response.header.data.icon)
        except NoMatchError:
            return ""

    def extract_name(self, response: NormalizedResponse) -> str:
        """Take the name from the asset entry of the overview section."""
        try:
            asset = response.overview.get_data_by_titles(
                OVERVIEW_DATA_TITLE_ASSET,
                OVERVIEW_DATA_TITLE_UNDERLYING_ASSET,
                OVERVIEW_DATA_TITLE_SECURITY,
            )
        except SectionDataTitleNotFound as error:
            raise SectionDataTitleNotFound(
                f"could not get overview section asset: {error}"
            ) from error
        return asset.detail.text

    def extract_icon(self, response: NormalizedResponse) -> str:
        return response.header.data.icon

    def handle_error(self, error: Exception) -> Exception:
        """Turn a missing section entry into :class:`InsufficientDataError`."""
        if not isinstance(error, SectionDataTitleNotFound):
            return error
        wrapped = InsufficientDataError(f"insufficient data resolved: {error}")
        wrapped.__cause__ = error
        return wrapped