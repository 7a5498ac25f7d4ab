"""
HTTP gateway to the restaurant REST backend.

Every operation is a single request/response with no retry. Responses use
the envelope {success, data, message}; payloads are validated into typed
records at this boundary so malformed shapes never reach the wizard.
"""
import asyncio
from typing import Any, Dict, List, Optional, Type, TypeVar, Union
from datetime import date

import requests
from pydantic import BaseModel, TypeAdapter, ValidationError

from core.logging import get_logger
from core.session import SessionStore, get_session_store
from core.settings import settings
from domain.enums import ReservationStatus
from domain.errors import (
    ConflictError,
    RequestFailure,
    ServerValidationError,
    SessionExpiredError,
)
from domain.models import (
    ApiResponse,
    AvailabilityQuery,
    Reservation,
    ReservationCreate,
    Table,
    TableCreate,
)


logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Endpoint paths
TABLES_PATH = "/api/tables"
AVAILABLE_TABLES_PATH = "/api/tables/available"
RESERVATIONS_PATH = "/api/reservations"

# Messages the backend uses when a table was taken after the availability check
CONFLICT_HINTS = ("already", "not available", "unavailable", "conflict", "booked")


class ReservationGateway:
    """Typed client for the tables and reservations endpoints."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        session_store: Optional[SessionStore] = None,
        http: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the gateway.

        Args:
            base_url: Backend base URL (defaults to settings.api_base_url)
            session_store: Bearer token provider (defaults to the global store)
            http: requests.Session to send requests through
            timeout: Per-request timeout in seconds
        """
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.session_store = session_store or get_session_store()
        self.timeout = timeout or settings.request_timeout_seconds
        self._http = http or requests.Session()
        self._http.headers.update({"Content-Type": "application/json"})

    def close(self) -> None:
        self._http.close()

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    async def fetch_all_tables(self) -> List[Table]:
        data = await asyncio.to_thread(self._request, "GET", TABLES_PATH)
        return self._parse_list(Table, data)

    async def fetch_available_tables(self, query: AvailabilityQuery) -> List[Table]:
        data = await asyncio.to_thread(
            self._request, "GET", AVAILABLE_TABLES_PATH, params=query.to_params()
        )
        return self._parse_list(Table, data)

    async def create_table(self, table: TableCreate) -> Table:
        data = await asyncio.to_thread(
            self._request, "POST", TABLES_PATH, json=table.to_wire(), rejection=ServerValidationError
        )
        return self._parse_one(Table, data)

    async def update_table(self, table_id: str, changes: Dict[str, Any]) -> Table:
        data = await asyncio.to_thread(
            self._request, "PUT", f"{TABLES_PATH}/{table_id}", json=changes, rejection=ServerValidationError
        )
        return self._parse_one(Table, data)

    async def delete_table(self, table_id: str) -> None:
        await asyncio.to_thread(self._request, "DELETE", f"{TABLES_PATH}/{table_id}")

    # ------------------------------------------------------------------
    # Reservations
    # ------------------------------------------------------------------

    async def fetch_reservations(
        self,
        date: Optional[date] = None,
        status: Optional[Union[ReservationStatus, str]] = None,
    ) -> List[Reservation]:
        params: Dict[str, Any] = {}
        if date is not None:
            params["date"] = date.isoformat()
        if status is not None:
            params["status"] = ReservationStatus(status).value
        data = await asyncio.to_thread(
            self._request, "GET", RESERVATIONS_PATH, params=params or None
        )
        return self._parse_list(Reservation, data)

    async def create_reservation(self, payload: ReservationCreate) -> Reservation:
        """
        Create a reservation.

        Raises:
            ConflictError: the table/time was taken since the availability check
            ServerValidationError: the server rejected the payload
            RequestFailure: network or server error
        """
        data = await asyncio.to_thread(
            self._request, "POST", RESERVATIONS_PATH, json=payload.to_wire(), rejection=ServerValidationError
        )
        reservation = self._parse_one(Reservation, data)
        logger.info(
            f"Created reservation {reservation.id} for {reservation.customer_name} "
            f"at table {reservation.table_number}"
        )
        return reservation

    async def update_reservation_status(
        self,
        reservation_id: str,
        status: Union[ReservationStatus, str],
    ) -> Optional[Reservation]:
        """Set a reservation's status; returns the updated record when the server sends one."""
        status_value = ReservationStatus(status).value
        data = await asyncio.to_thread(
            self._request,
            "PUT",
            f"{RESERVATIONS_PATH}/{reservation_id}/status",
            json={"status": status_value},
            rejection=ServerValidationError,
        )
        if not isinstance(data, dict):
            return None
        return self._parse_one(Reservation, data)

    async def delete_reservation(self, reservation_id: str) -> None:
        await asyncio.to_thread(self._request, "DELETE", f"{RESERVATIONS_PATH}/{reservation_id}")

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Any] = None,
        rejection: Type[Exception] = RequestFailure,
    ) -> Any:
        """
        Send one request and unwrap the response envelope.

        Args:
            rejection: error raised when the server answers success=false

        Returns:
            The envelope's data field
        """
        url = f"{self.base_url}{path}"
        headers = {}
        if self.session_store.token:
            headers["Authorization"] = f"Bearer {self.session_store.token}"

        try:
            response = self._http.request(
                method,
                url,
                params=params,
                json=json,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Network error on {method} {path}: {e}")
            raise RequestFailure("Unable to connect to server. Please check your connection.") from e

        return self._unwrap(method, path, response, rejection)

    def _unwrap(
        self,
        method: str,
        path: str,
        response: requests.Response,
        rejection: Type[Exception],
    ) -> Any:
        status_code = response.status_code
        try:
            body = response.json()
        except ValueError:
            body = None
        message = body.get("message") if isinstance(body, dict) else None
        if not isinstance(message, str):
            message = None

        if status_code == 401:
            logger.warning(f"Unauthorized on {method} {path}; invalidating session")
            self.session_store.invalidate()
            raise SessionExpiredError(message or "Session expired. Please sign in again.", status_code)

        if status_code == 409:
            raise ConflictError(message or "The selected table is no longer available", status_code)

        if status_code in (400, 422):
            logger.warning(f"Server rejected {method} {path}: {message}")
            raise ServerValidationError(message or f"Invalid request ({status_code})", status_code)

        if status_code >= 400:
            logger.error(f"Server error {status_code} on {method} {path}")
            raise RequestFailure(message or f"Server responded with {status_code}", status_code)

        if not isinstance(body, dict):
            raise RequestFailure(f"Unexpected response from {path}", status_code)

        try:
            envelope = ApiResponse.model_validate(body)
        except ValidationError as e:
            logger.error(
                f"Malformed response envelope from {method} {path}: {e.error_count()} errors",
                extra={"method": method, "path": path, "status_code": status_code}
            )
            raise ServerValidationError(f"Unexpected response from {path}", status_code) from e

        if not envelope.success:
            error_message = envelope.message or f"{method} {path} failed"
            if rejection is ServerValidationError and _looks_like_conflict(error_message):
                raise ConflictError(error_message, status_code)
            raise rejection(error_message, status_code)

        return envelope.data

    @staticmethod
    def _parse_list(model: Type[ModelT], data: Any) -> List[ModelT]:
        if data is None:
            return []
        try:
            return TypeAdapter(List[model]).validate_python(data)
        except ValidationError as e:
            logger.error(f"Malformed {model.__name__} list from backend: {e.error_count()} errors")
            raise ServerValidationError(f"Malformed {model.__name__} data from server") from e

    @staticmethod
    def _parse_one(model: Type[ModelT], data: Any) -> ModelT:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.error(f"Malformed {model.__name__} from backend: {e.error_count()} errors")
            raise ServerValidationError(f"Malformed {model.__name__} data from server") from e


def _looks_like_conflict(message: str) -> bool:
    lowered = message.lower()
    return any(hint in lowered for hint in CONFLICT_HINTS)
