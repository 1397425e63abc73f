"""Building transactions from normalized details responses."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Protocol

from trportfolio.portfolio.document import Document, DocumentBuilder
from trportfolio.portfolio.instrument import Instrument
from trportfolio.portfolio.instrument_builder import InstrumentBuilder
from trportfolio.portfolio.parsing import (
    NoMatchError,
    parse_float_with_comma,
    parse_float_with_period,
    parse_numeric_value_from_string,
)
from trportfolio.portfolio.transaction import (
    TYPE_DEPOSIT,
    TYPE_DIVIDEND_PAYOUT,
    TYPE_INTEREST_PAYOUT,
    TYPE_PURCHASE,
    TYPE_ROUND_UP,
    TYPE_SALE,
    TYPE_SAVEBACK,
    TYPE_WITHDRAWAL,
    InsufficientDataError,
    Transaction,
    UnknownResponseError,
    UnsupportedResponseError,
)
from trportfolio.timeline.details import (
    PERFORMANCE_DATA_TITLE_LOSS,
    PERFORMANCE_DATA_TITLE_PROFIT,
    PERFORMANCE_DATA_TITLE_YIELD,
    RESPONSE_TIME_FORMAT,
    RESPONSE_TIME_FORMAT_ALT,
    TRANSACTION_DATA_TITLE_COMMISSION,
    TRANSACTION_DATA_TITLE_RATE,
    TRANSACTION_DATA_TITLE_RATE_ALT,
    TRANSACTION_DATA_TITLE_RATE_ALT2,
    TRANSACTION_DATA_TITLE_RATE_ALT3,
    TRANSACTION_DATA_TITLE_SHARES,
    TRANSACTION_DATA_TITLE_SHARES_ALT,
    TRANSACTION_DATA_TITLE_TAX,
    TRANSACTION_DATA_TITLE_TOTAL,
    TREND_NEGATIVE,
    NormalizedResponse,
    SectionDataTitleNotFound,
    TableSection,
)
from trportfolio.timeline.types import DetailsType, TypeResolver, UnsupportedTypeError

logger = logging.getLogger(__name__)


class _InstrumentBuilder(Protocol):
    def build(self, response: NormalizedResponse) -> Instrument: ...


class _DocumentBuilder(Protocol):
    def build(
        self, transaction_uuid: str, parent_timestamp: datetime, response: NormalizedResponse
    ) -> list[Document]: ...


def _caused_by(error: BaseException | None, cls: type[BaseException]) -> bool:
    while error is not None:
        if isinstance(error, cls):
            return True
        error = error.__cause__
    return False


def _table_value(section: TableSection, what: str, *titles: str) -> tuple[str, bool]:
    try:
        entry = section.get_data_by_titles(*titles)
    except SectionDataTitleNotFound as error:
        raise SectionDataTitleNotFound(f"could not get {what}: {error}") from error
    return entry.detail.text, entry.detail.trend == TREND_NEGATIVE


class BaseModelBuilder:
    """Extracts the common parts of a transaction from a response."""

    def __init__(
        self,
        response: NormalizedResponse,
        instrument_builder: _InstrumentBuilder | None = None,
        documents_builder: _DocumentBuilder | None = None,
    ) -> None:
        self.response = response
        self.instrument_builder = (
            instrument_builder if instrument_builder is not None else InstrumentBuilder()
        )
        self.documents_builder = (
            documents_builder if documents_builder is not None else DocumentBuilder()
        )

    def extract_status(self) -> str:
        return self.response.header.data.status

    def extract_timestamp(self) -> datetime:
        """Parse the header timestamp in either of the two known formats."""
        text = self.response.header.data.timestamp
        last_error: ValueError | None = None
        for time_format in (RESPONSE_TIME_FORMAT, RESPONSE_TIME_FORMAT_ALT):
            try:
                return datetime.strptime(text, time_format)
            except ValueError as error:
                last_error = error
        raise ValueError(f"could not parse header section timestamp: {last_error}") from last_error

    def extract_shares_amount(self) -> float:
        text, negative = _table_value(
            self.response.transaction,
            "transaction section shares",
            TRANSACTION_DATA_TITLE_SHARES,
            TRANSACTION_DATA_TITLE_SHARES_ALT,
        )
        try:
            return parse_float_with_period(text)
        except ValueError:
            pass
        try:
            return parse_float_with_comma(text, negative)
        except ValueError as error:
            raise ValueError(
                f"could not parse transaction section shares to float: {error}"
            ) from error

    def extract_rate_value(self) -> float:
        text, negative = _table_value(
            self.response.transaction,
            "transaction section rate",
            TRANSACTION_DATA_TITLE_RATE,
            TRANSACTION_DATA_TITLE_RATE_ALT,
            TRANSACTION_DATA_TITLE_RATE_ALT2,
            TRANSACTION_DATA_TITLE_RATE_ALT3,
        )
        try:
            return parse_float_with_comma(text, negative)
        except ValueError as error:
            raise ValueError(
                f"could not parse transaction section rate to float: {error}"
            ) from error

    def extract_commission_amount(self) -> float:
        """Return the commission; a missing or unparsable entry means none."""
        try:
            entry = self.response.transaction.get_data_by_titles(
                TRANSACTION_DATA_TITLE_COMMISSION
            )
        except SectionDataTitleNotFound:
            return 0.0
        try:
            return parse_float_with_comma(entry.detail.text, entry.detail.trend == TREND_NEGATIVE)
        except NoMatchError:
            return 0.0
        except ValueError as error:
            raise ValueError(
                f"could not parse transaction section commission to float: {error}"
            ) from error

    def extract_total_amount(self) -> float:
        text, negative = _table_value(
            self.response.transaction, "transaction section total", TRANSACTION_DATA_TITLE_TOTAL
        )
        try:
            return parse_float_with_comma(text, negative)
        except ValueError as error:
            raise ValueError(
                f"could not parse transaction section total to float: {error}"
            ) from error

    def extract_tax_amount(self) -> float:
        text, _ = _table_value(
            self.response.transaction, "transaction section tax amount", TRANSACTION_DATA_TITLE_TAX
        )
        try:
            return parse_float_with_comma(text, False)
        except ValueError:
            pass
        try:
            return parse_float_with_period(text)
        except ValueError as error:
            raise ValueError(
                f"could not parse transaction section tax amount to float: {error}"
            ) from error

    def build_documents(self, model: Transaction) -> list[Document]:
        try:
            return list(self.documents_builder.build(model.uuid, model.timestamp, self.response))
        except ValueError as error:
            raise ValueError(f"document model builder error: {error}") from error

    def handle_error(self, error: Exception) -> Exception:
        """Turn a missing section entry into :class:`InsufficientDataError`."""
        if not _caused_by(error, SectionDataTitleNotFound):
            return error
        wrapped = InsufficientDataError(f"insufficient data resolved: {error}")
        wrapped.__cause__ = error
        return wrapped

    def _documents_or_empty(self, model: Transaction) -> list[Document]:
        try:
            return self.build_documents(model)
        except ValueError as error:
            logger.debug("could not build documents (id %s): %s", model.uuid, error)
            return []


class PurchaseBuilder(BaseModelBuilder):
    def build(self) -> Transaction:
        model = Transaction(uuid=self.response.id, type=TYPE_PURCHASE)
        try:
            model.status = self.extract_status()
            model.timestamp = self.extract_timestamp()
            model.shares = self.extract_shares_amount()
            model.rate = self.extract_rate_value()
            model.commission = self.extract_commission_amount()
            model.total = self.extract_total_amount()
            model.instrument = self.instrument_builder.build(self.response)
        except SectionDataTitleNotFound as error:
            raise self.handle_error(error) from error
        model.documents = self._documents_or_empty(model)
        return model


class SaleBuilder(PurchaseBuilder):
    def extract_performance_value(self, *titles: str) -> float:
        text, negative = _table_value(
            self.response.performance, f"performance section data by titles {list(titles)}", *titles
        )
        try:
            return parse_float_with_comma(text, negative)
        except ValueError as error:
            raise ValueError(
                f"could not parse performance section data to float by titles {list(titles)}: {error}"
            ) from error

    def extract_yield(self) -> float:
        return self.extract_performance_value(PERFORMANCE_DATA_TITLE_YIELD)

    def extract_profit_and_loss(self) -> float:
        return self.extract_performance_value(
            PERFORMANCE_DATA_TITLE_PROFIT, PERFORMANCE_DATA_TITLE_LOSS
        )

    def build(self) -> Transaction:
        model = super().build()
        model.type = TYPE_SALE
        try:
            model.tax_amount = self.extract_tax_amount()
        except (LookupError, ValueError) as error:
            logger.debug("could not extract tax amount (id %s): %s", model.uuid, error)
            model.tax_amount = 0.0
        try:
            model.yield_ = self.extract_yield()
            model.profit = self.extract_profit_and_loss()
        except SectionDataTitleNotFound as error:
            raise self.handle_error(error) from error
        return model


class RoundUpBuilder(PurchaseBuilder):
    def build(self) -> Transaction:
        model = super().build()
        model.type = TYPE_ROUND_UP
        return model


class SavebackBuilder(PurchaseBuilder):
    def build(self) -> Transaction:
        model = super().build()
        model.type = TYPE_SAVEBACK
        return model


class DividendPayoutBuilder(PurchaseBuilder):
    def build(self) -> Transaction:
        model = super().build()
        model.type = TYPE_DIVIDEND_PAYOUT
        return model


class DepositBuilder(BaseModelBuilder):
    def build(self) -> Transaction:
        model = Transaction(uuid=self.response.id, type=TYPE_DEPOSIT)
        model.status = self.extract_status()
        model.timestamp = self.extract_timestamp()
        try:
            model.total = self.extract_total_amount()
        except SectionDataTitleNotFound as error:
            raise self.handle_error(error) from error
        model.instrument = self.instrument_builder.build(self.response)
        model.documents = self._documents_or_empty(model)
        return model

    def extract_total_amount(self) -> float:
        """Take the amount from the header title."""
        text = parse_numeric_value_from_string(self.response.header.title)
        return parse_float_with_comma(text, False)


class WithdrawBuilder(DepositBuilder):
    def build(self) -> Transaction:
        model = super().build()
        model.type = TYPE_WITHDRAWAL
        return model


class InterestPayoutBuilder(BaseModelBuilder):
    def build(self) -> Transaction:
        model = Transaction(uuid=self.response.id, type=TYPE_INTEREST_PAYOUT)
        model.status = self.extract_status()
        model.timestamp = self.extract_timestamp()

        try:
            model.tax_amount = self.extract_tax_amount()
        except (LookupError, ValueError) as error:
            logger.debug("could not extract tax amount (id %s): %s", model.uuid, error)
            model.tax_amount = 0.0

        try:
            model.total = self.extract_total_amount()
        except (LookupError, ValueError):
            model.total = self._total_from_title()

        model.instrument = self.instrument_builder.build(self.response)
        model.documents = self._documents_or_empty(model)
        return model

    def _total_from_title(self) -> float:
        text = parse_numeric_value_from_string(self.response.header.title)
        try:
            return parse_float_with_comma(text, False)
        except ValueError:
            return parse_float_with_period(text)


class ModelBuilderFactory:
    """Chooses the builder that fits the kind of transaction."""

    def __init__(
        self,
        resolver: TypeResolver | None = None,
        instrument_builder: _InstrumentBuilder | None = None,
        documents_builder: _DocumentBuilder | None = None,
    ) -> None:
        self._resolver = resolver if resolver is not None else TypeResolver()
        self._instrument_builder = (
            instrument_builder if instrument_builder is not None else InstrumentBuilder()
        )
        self._documents_builder = (
            documents_builder if documents_builder is not None else DocumentBuilder()
        )

    def create(self, event_type: str, response: NormalizedResponse) -> BaseModelBuilder:
        """Return a builder for *response*; raise for unsupported or unknown kinds."""
        try:
            details_type = self._resolver.resolve(event_type, response)
        except UnsupportedTypeError as error:
            raise UnsupportedResponseError("unsupported response") from error

        builders: dict[DetailsType, type[BaseModelBuilder]] = {
            DetailsType.PURCHASE: PurchaseBuilder,
            DetailsType.SALE: SaleBuilder,
            DetailsType.DIVIDEND_PAYOUT: DividendPayoutBuilder,
            DetailsType.ROUND_UP: RoundUpBuilder,
            DetailsType.SAVEBACK: SavebackBuilder,
            DetailsType.DEPOSIT: DepositBuilder,
            DetailsType.WITHDRAWAL: WithdrawBuilder,
            DetailsType.INTEREST_PAYOUT: InterestPayoutBuilder,
        }
        if details_type in (DetailsType.UNSUPPORTED, DetailsType.CARD_PAYMENT):
            raise UnsupportedResponseError("unsupported response")
        builder_class = builders.get(details_type)
        if builder_class is None:
            raise UnknownResponseError("unknown response")
        return builder_class(response, self._instrument_builder, self._documents_builder)