"""Application state: the query state machine, history, and theme.

One ComfortController per user session owns the current result, error,
loading status, prediction history, theme, and last-used location.
Persistence is an observer (StatePersistence) that mirrors changes into
the LocalStore; the store only seeds the controller at startup.

Submissions are tagged with a monotonically increasing request token.
A completion whose token is not the latest one is discarded, so a slow
earlier request can never overwrite the result of a newer one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Union

from comfort_predictor import config, predictions
from comfort_predictor.errors import InputValidationError, PredictorError, SchemaError
from comfort_predictor.models import (
    FullCountryOverviewResult,
    FullPredictionResult,
    HistoryItem,
    Theme,
)
from comfort_predictor.storage import (
    HISTORY_KEY,
    LAST_LOCATION_KEY,
    THEME_KEY,
    LocalStore,
)
from comfort_predictor.validation import parse_prediction

logger = logging.getLogger(__name__)

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred. Please try again later."
MISSING_DAILY_INPUT_MESSAGE = "Please provide a location and a date."
MISSING_COUNTRY_INPUT_MESSAGE = "Please provide a country, month, and year."


class Status(Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    FAILED = "failed"


class Event(Enum):
    """Controller changes that observers may want to persist."""

    HISTORY_CHANGED = "history_changed"
    THEME_CHANGED = "theme_changed"
    LOCATION_CHANGED = "location_changed"


@dataclass(frozen=True)
class DailyQuery:
    location: str
    date: str


@dataclass(frozen=True)
class CountryQuery:
    """Country overview request; month and year may arrive as form strings."""

    country: str
    month: Union[int, str]
    year: Union[int, str]


Query = Union[DailyQuery, CountryQuery]


@dataclass(frozen=True)
class DailyResult:
    data: FullPredictionResult


@dataclass(frozen=True)
class CountryResult:
    data: FullCountryOverviewResult


Result = Union[DailyResult, CountryResult]
Listener = Callable[[Event, "ComfortController"], None]


def _parse_int(value: Union[int, str]) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip(), 10)
    except ValueError:
        return None


def validate_query(query: Query) -> Query:
    """Check the required fields for the query's mode and normalize them.

    Raises:
        InputValidationError: If a required field is missing or unusable.
    """
    if isinstance(query, DailyQuery):
        location = (query.location or "").strip()
        date = (query.date or "").strip()
        if not location or not date:
            raise InputValidationError(MISSING_DAILY_INPUT_MESSAGE)
        return DailyQuery(location=location, date=date)

    country = (query.country or "").strip()
    month = _parse_int(query.month) if query.month not in (None, "") else None
    year = _parse_int(query.year) if query.year not in (None, "") else None
    if not country or month is None or year is None:
        raise InputValidationError(MISSING_COUNTRY_INPUT_MESSAGE)
    if not 1 <= month <= 12:
        raise InputValidationError("Please choose a month between 1 and 12.")
    return CountryQuery(country=country, month=month, year=year)


class ComfortController:
    """Session state holder driving the Idle/Loading/Success/Failed machine.

    Args:
        theme: Initial theme.
        history: Initial history, newest first.
        last_location: Location used to prefill the daily form.
        history_limit: Maximum number of history entries kept.
    """

    def __init__(
        self,
        theme: Theme = Theme.LIGHT,
        history: list[HistoryItem] | None = None,
        last_location: str = "",
        history_limit: int | None = None,
    ) -> None:
        self.history_limit = config.HISTORY_LIMIT if history_limit is None else history_limit
        self.status = Status.IDLE
        self.result: Result | None = None
        self.error: str | None = None
        self._theme = theme
        self._history: list[HistoryItem] = list(history or [])[: self.history_limit]
        self._last_location = last_location
        self._token = 0
        self._pending: dict[int, Query] = {}
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _emit(self, event: Event) -> None:
        for listener in self._listeners:
            listener(event, self)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def theme(self) -> Theme:
        return self._theme

    @property
    def history(self) -> tuple[HistoryItem, ...]:
        return tuple(self._history)

    @property
    def last_location(self) -> str:
        return self._last_location

    @property
    def is_loading(self) -> bool:
        return self.status is Status.LOADING

    def history_locations(self) -> list[str]:
        """Distinct history locations, most recently predicted first."""
        return list(dict.fromkeys(item.location for item in self._history))

    def history_for(self, location: str) -> list[HistoryItem]:
        """History entries for one location, sorted ascending by date."""
        return sorted(
            (item for item in self._history if item.location == location),
            key=lambda item: item.date,
        )

    # ------------------------------------------------------------------
    # Query lifecycle
    # ------------------------------------------------------------------

    def begin(self, query: Query) -> int | None:
        """Start a submission.

        Clears the previous result and error immediately. Returns the
        request token, or None when input validation failed (the state
        is then FAILED and no request should be made).
        """
        self._token += 1
        self._pending.clear()
        self.result = None
        self.error = None

        try:
            query = validate_query(query)
        except InputValidationError as exc:
            self.status = Status.FAILED
            self.error = str(exc)
            return None

        self.status = Status.LOADING
        self._pending[self._token] = query
        return self._token

    def _is_current(self, token: int) -> bool:
        if token != self._token or token not in self._pending:
            logger.debug("Discarding stale completion for request %d", token)
            return False
        return True

    def complete(
        self, token: int, result: FullPredictionResult | FullCountryOverviewResult
    ) -> bool:
        """Apply a successful response. Returns False if the token is stale."""
        if not self._is_current(token):
            return False
        query = self._pending.pop(token)

        if isinstance(result, FullPredictionResult):
            self.result = DailyResult(result)
            self._add_history(HistoryItem.capture(result.prediction))
            if isinstance(query, DailyQuery):
                self._set_last_location(query.location)
        else:
            self.result = CountryResult(result)

        self.status = Status.SUCCESS
        return True

    def fail(self, token: int, error: BaseException) -> bool:
        """Record a failed request. Returns False if the token is stale."""
        if not self._is_current(token):
            return False
        self._pending.pop(token)

        if isinstance(error, PredictorError) and str(error):
            self.error = str(error)
        else:
            self.error = UNKNOWN_ERROR_MESSAGE
        self.status = Status.FAILED
        return True

    def submit(self, query: Query) -> Status:
        """Validate, call the prediction service, and apply the outcome."""
        token = self.begin(query)
        if token is None:
            return self.status

        pending = self._pending[token]
        try:
            if isinstance(pending, DailyQuery):
                result = predictions.get_comfort_prediction(
                    predictions.daily_query(pending.location, pending.date)
                )
            else:
                result = predictions.get_country_overview(
                    pending.country, int(pending.month), int(pending.year)
                )
        except Exception as exc:
            logger.exception("Prediction request %d failed", token)
            self.fail(token, exc)
        else:
            self.complete(token, result)
        return self.status

    # ------------------------------------------------------------------
    # History, theme, location
    # ------------------------------------------------------------------

    def _add_history(self, item: HistoryItem) -> None:
        self._history = [item, *self._history][: self.history_limit]
        self._emit(Event.HISTORY_CHANGED)

    def clear_history(self) -> None:
        self._history = []
        self._emit(Event.HISTORY_CHANGED)

    def toggle_theme(self) -> Theme:
        self._theme = self._theme.toggled()
        self._emit(Event.THEME_CHANGED)
        return self._theme

    def _set_last_location(self, location: str) -> None:
        self._last_location = location
        self._emit(Event.LOCATION_CHANGED)


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

class StatePersistence:
    """Observer that writes controller changes to a LocalStore."""

    def __init__(self, store: LocalStore) -> None:
        self.store = store

    def __call__(self, event: Event, controller: ComfortController) -> None:
        if event is Event.HISTORY_CHANGED:
            if controller.history:
                self.store.set_json(HISTORY_KEY, [item.to_dict() for item in controller.history])
            else:
                self.store.remove(HISTORY_KEY)
        elif event is Event.THEME_CHANGED:
            self.store.set(THEME_KEY, controller.theme.value)
        elif event is Event.LOCATION_CHANGED:
            self.store.set(LAST_LOCATION_KEY, controller.last_location)


def load_history(store: LocalStore) -> list[HistoryItem]:
    """Read persisted history, skipping entries that no longer validate."""
    raw = store.get_json(HISTORY_KEY, default=[])
    if not isinstance(raw, list):
        logger.warning("Ignoring persisted history: expected a JSON array")
        return []

    items = []
    for entry in raw:
        if not isinstance(entry, dict) or not isinstance(entry.get("id"), str):
            logger.warning("Skipping malformed history entry")
            continue
        try:
            prediction = parse_prediction(entry)
        except SchemaError as exc:
            logger.warning("Skipping invalid history entry %r: %s", entry.get("id"), exc)
            continue
        items.append(HistoryItem.from_prediction(prediction, entry["id"]))
    return items


def load_controller(store: LocalStore, history_limit: int | None = None) -> ComfortController:
    """Create a controller seeded from ``store`` and persisting back into it."""
    controller = ComfortController(
        theme=Theme.parse(store.get(THEME_KEY)),
        history=load_history(store),
        last_location=store.get(LAST_LOCATION_KEY) or "",
        history_limit=history_limit,
    )
    controller.subscribe(StatePersistence(store))
    return controller
