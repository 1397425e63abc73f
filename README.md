# trportfolio

`trportfolio` is a library for fetching the timeline of a Trade Republic
account and turning it into data you can work with:

* rows of a `transactions.csv` file, one per transaction (purchases, sales,
  dividends, round ups, saveback, deposits, withdrawals and interest payouts),
* rows of a SQLite table holding the transactions,
* the PDF documents attached to transactions and activity log entries, saved
  by default under `./documents/transactions` and `./documents/activity`.

Responses from the service can be written to disk as JSON and read back later,
so a download can be replayed without a network connection.

## Layout

| Module | What it holds |
| --- | --- |
| `trportfolio.api.client` | `RestClient`: login, one-time-code confirmation and session refresh over REST |
| `trportfolio.api.auth` | `AuthClient`: holds the tokens and refreshes the session in a background thread |
| `trportfolio.api.token` | `Token`, `token_from_set_cookie`, `token_from_file` |
| `trportfolio.api.headers` | `Headers`: the HTTP headers sent to the service |
| `trportfolio.api.message` | `parse_message`, `Message`: websocket messages |
| `trportfolio.api.websocket_reader` | `WebsocketReader`: subscribes to timeline data over the websocket |
| `trportfolio.api.wsclient` | `WSClient`: list (following page cursors) and details requests |
| `trportfolio.console` | `AuthService`, `read_password`: asks for phone number, PIN and 2FA code |
| `trportfolio.reader` | `JSONReader`: reads stored responses back |
| `trportfolio.writer` | `JSONWriter` stores responses; `NilWriter` discards them |
| `trportfolio.timeline.transactions` | timeline items, `EventType`, `EventTypeResolver`, `TransactionsClient` |
| `trportfolio.timeline.activitylog` | activity log items and `ActivityLogClient` |
| `trportfolio.timeline.details` | details sections and `DetailsClient` |
| `trportfolio.timeline.normalizer` | `TransactionResponseNormalizer`, `ActivityLogResponseNormalizer` |
| `trportfolio.timeline.types` | `TypeResolver`: tells purchase, sale, dividend and the other kinds apart |
| `trportfolio.portfolio.instrument` | `Instrument`, `InstrumentType`, `TypeResolver`, `extract_isin_from_icon` |
| `trportfolio.portfolio.instrument_builder` | `InstrumentBuilder` |
| `trportfolio.portfolio.document` | `Document`, `DocumentBuilder`, `Downloader` |
| `trportfolio.portfolio.transaction` | `Transaction` and its error classes |
| `trportfolio.portfolio.transaction_builder` | `ModelBuilderFactory` and one builder per kind of transaction |
| `trportfolio.portfolio.csv_factory` | `CSVEntryFactory`: turns a transaction into a CSV row |
| `trportfolio.portfolio.transaction_processor` | `TransactionProcessor`: stores, exports and fetches documents for one transaction |
| `trportfolio.portfolio.transaction_handler` | `TransactionHandler`: processes the whole transactions timeline |
| `trportfolio.portfolio.activity` | `ActivityProcessor`, `ActivityHandler`: activity log documents |
| `trportfolio.csvfile` | `CSVEntry`, `CSVReader`, `CSVWriter` |
| `trportfolio.database` | `open_sqlite`, `open_sqlite_in_memory`, `Repository` |

## Replaying stored responses

`JSONWriter` stores each response under `responses/<data type>/`, named after
its `id` field or, for list pages, `page-1.json`, `page-2.json` and so on.
`JSONReader` reads the same layout back, so the handlers can run offline:

```python
from trportfolio.csvfile import CSVReader, CSVWriter
from trportfolio.database import Repository, open_sqlite
from trportfolio.portfolio.csv_factory import CSVEntryFactory
from trportfolio.portfolio.document import Downloader
from trportfolio.portfolio.transaction import Transaction
from trportfolio.portfolio.transaction_builder import ModelBuilderFactory
from trportfolio.portfolio.transaction_handler import TransactionHandler
from trportfolio.portfolio.transaction_processor import TransactionProcessor
from trportfolio.reader import JSONReader
from trportfolio.timeline.details import DetailsClient
from trportfolio.timeline.normalizer import TransactionResponseNormalizer
from trportfolio.timeline.transactions import EventTypeResolver, TransactionsClient

reader = JSONReader("responses")
processor = TransactionProcessor(
    ModelBuilderFactory(),
    Repository(open_sqlite(), Transaction),
    CSVEntryFactory(),
    CSVReader(),
    CSVWriter(),
    Downloader(),
)
handler = TransactionHandler(
    TransactionsClient(reader),
    DetailsClient(reader),
    TransactionResponseNormalizer(),
    EventTypeResolver(),
    processor,
)
counter = handler.handle()
print(counter.summary())  # (total, processed, skipped)
```

For a live download, pass a `WebsocketReader` instead of the `JSONReader`; it
needs an `AuthService` built on an `AuthClient` and, optionally, a
`JSONWriter` to keep the responses. Transactions already present in the CSV
file are not processed again, and documents already on disk are not
downloaded again.

## Parsing amounts

Amounts in the service's responses are formatted the German way. The helpers
in `trportfolio.portfolio.parsing` read them:

```python
from trportfolio.portfolio.parsing import (
    parse_float_with_comma,
    parse_float_with_period,
    parse_numeric_value_from_string,
)

parse_numeric_value_from_string("Du hast 1.921,89 €  investiert")  # "1.921,89"
parse_float_with_comma("1.921,89 € ", False)                      # 1921.89
parse_float_with_comma("66,60 EUR", True)                         # -66.6
parse_float_with_period("0.0234898")                              # 0.0234898
```

A value that does not match the expected shape raises `NoMatchError`.

## Instruments

```python
from trportfolio.portfolio.instrument import extract_isin_from_icon

extract_isin_from_icon("logos/DE000A0F5UF5/v2")  # "DE000A0F5UF5"
```

Icons without an ISIN, such as `logos/timeline_document/v2`, raise
`NoMatchError`. `TypeResolver.resolve` sorts an `Instrument` into ETF,
cryptocurrency, lending, cash or other.

## Tokens

Session and refresh tokens are taken from the `Set-Cookie` headers of the
login responses. `AuthClient.provide_otp` saves them to the files `.session`
and `.refresh` in its token directory (the current directory by default), and
a new `AuthClient` loads them from there. The files are written with
owner-only permissions; keep them private. Call `AuthClient.close()`, or use
it as a context manager, to stop the background session refresh.

## What the package does not do

There is no command-line program: the package installs no command, and the
pieces above have to be put together in Python as shown. Instruments and
documents are not saved to the database by the handlers; only transactions
are passed to a `Repository`.

## Running the tests

Install the `test` extra and run `pytest`; the suite uses `responses` in
place of real HTTP traffic.