"""PostgREST (Supabase) submission gateway over HTTP."""

import json
import socket
from datetime import datetime
from typing import Any, Optional, Sequence
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlparse
from urllib.request import Request, urlopen

from ..config.persistence import RestGatewayConfig
from ..data.models import Asset, Prediction, Selection, Submission
from ..errors import ConfigurationError, PartialSubmissionError, PersistenceError
from ..logging.config import get_persistence_logger
from ..utils.time import parse_timestamp, utc_now
from .base import SubmissionGateway


class RestSubmissionGateway(SubmissionGateway):
    """
    Stores submissions through a PostgREST API.

    PostgREST cannot span two inserts with one transaction, so the team row is
    inserted first, then its selection rows. If the second insert fails the
    team row is deleted again and PartialSubmissionError is raised.
    """

    def __init__(self, config: RestGatewayConfig):
        self.config = config
        self.logger = get_persistence_logger(__name__).bind(backend="rest")

        parsed = urlparse(config.base_url)
        if not parsed.scheme or not parsed.netloc:
            raise ConfigurationError(f"Invalid URL: {config.base_url}")

    def _table_url(self, table: str, query: str = "") -> str:
        url = f"{self.config.base_url}/rest/v1/{table}"
        return f"{url}?{query}" if query else url

    def _request(
        self,
        method: str,
        url: str,
        body: Optional[Any] = None,
        prefer: Optional[str] = None
    ) -> Any:
        """Send one request and decode the JSON response body, if any."""
        headers = {
            'apikey': self.config.api_key,
            'Authorization': f"Bearer {self.config.api_key}",
            'Accept': 'application/json',
            'User-Agent': 'leagues-app/1.0',
        }
        if prefer:
            headers['Prefer'] = prefer
        if self.config.headers:
            headers.update(self.config.headers)

        data = None
        if body is not None:
            data = json.dumps(body).encode('utf-8')
            headers['Content-Type'] = 'application/json'

        req = Request(url, data=data, headers=headers, method=method)

        try:
            with urlopen(req, timeout=self.config.timeout_seconds) as response:
                response_code = response.getcode()
                response_data = response.read().decode('utf-8')
        except HTTPError as e:
            self.logger.warning(
                "Submission backend HTTP error",
                method=method,
                url=url,
                error_code=e.code,
                error_reason=str(e.reason)
            )
            raise PersistenceError(
                f"HTTP {e.code}: {e.reason}",
                operation=method,
                target=url
            ) from e
        except (OSError, URLError, socket.timeout) as e:
            self.logger.warning(
                "Submission backend network error",
                method=method,
                url=url,
                error=str(e)
            )
            raise PersistenceError(
                f"Network error: {e}",
                operation=method,
                target=url
            ) from e

        if not 200 <= response_code < 300:
            raise PersistenceError(
                f"HTTP {response_code}: {response_data[:200]}",
                operation=method,
                target=url
            )

        if not response_data:
            return None

        try:
            return json.loads(response_data)
        except json.JSONDecodeError as e:
            raise PersistenceError(
                f"Invalid JSON response: {e}",
                operation=method,
                target=url
            ) from e

    def save_submission(
        self,
        selections: Sequence[Selection],
        contest_id: str,
        owner_identity: str,
        team_name: str = "My Team"
    ) -> Submission:
        selections = tuple(selections)

        inserted = self._request(
            'POST',
            self._table_url(self.config.teams_table),
            body={
                'wallet_address': owner_identity,
                'team_name': team_name,
                'contest_id': contest_id,
            },
            prefer='return=representation'
        )

        if not inserted or not isinstance(inserted, list) or 'id' not in inserted[0]:
            raise PersistenceError(
                "Failed to get team ID after insertion",
                operation="save_submission",
                target=self.config.teams_table
            )

        team = inserted[0]
        team_id = str(team['id'])

        token_rows = [
            {
                'team_id': team_id,
                'asset_id': s.asset.id,
                'token_symbol': s.asset.symbol,
                'token_name': s.asset.name,
                'logo_url': s.asset.image or "",
                'prediction': s.prediction.value,
                'position': position,
            }
            for position, s in enumerate(selections)
        ]

        try:
            stored = self._request(
                'POST',
                self._table_url(self.config.selections_table),
                body=token_rows,
                prefer='return=representation'
            )
            stored_rows = len(stored) if isinstance(stored, list) else 0
            if stored_rows != len(token_rows):
                raise PartialSubmissionError(
                    "Team stored without all of its selections",
                    expected_rows=len(token_rows),
                    stored_rows=stored_rows,
                    operation="save_submission",
                    target=self.config.selections_table
                )
        except PersistenceError as e:
            rolled_back = self._delete_team(team_id)
            self.logger.error(
                "Selection insert failed, team removed",
                submission_id=team_id,
                contest_id=contest_id,
                rolled_back=rolled_back,
                error=str(e)
            )
            if isinstance(e, PartialSubmissionError):
                e.context["rolled_back"] = rolled_back
                raise
            raise PartialSubmissionError(
                f"Selection insert failed: {e}",
                expected_rows=len(token_rows),
                stored_rows=0,
                operation="save_submission",
                target=self.config.selections_table,
                context={"rolled_back": rolled_back}
            ) from e

        self.logger.info(
            "Submission stored",
            submission_id=team_id,
            contest_id=contest_id,
            selection_count=len(selections)
        )

        return Submission(
            submission_id=team_id,
            contest_id=contest_id,
            owner_identity=owner_identity,
            selections=selections,
            submitted_at=self._created_at(team),
            team_name=team_name,
        )

    def _delete_team(self, team_id: str) -> bool:
        """Compensating delete after a failed selection insert."""
        try:
            self._request(
                'DELETE',
                self._table_url(self.config.teams_table, f"id=eq.{quote(team_id)}")
            )
            return True
        except PersistenceError as e:
            self.logger.error(
                "Compensating team delete failed",
                submission_id=team_id,
                error=str(e)
            )
            return False

    def _created_at(self, team: dict[str, Any]) -> datetime:
        raw = team.get('created_at') or team.get('submitted_at')
        if raw is None:
            return utc_now()
        return parse_timestamp(raw)

    def list_submissions(self, contest_id: str) -> list[Submission]:
        select = f"*,{self.config.selections_table}(*)"
        rows = self._request(
            'GET',
            self._table_url(
                self.config.teams_table,
                f"contest_id=eq.{quote(contest_id)}&select={quote(select)}&order=created_at.asc"
            )
        ) or []

        submissions = []
        for team in rows:
            try:
                submissions.append(self._decode_team(team, contest_id))
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                self.logger.error(
                    "Malformed team row",
                    contest_id=contest_id,
                    error=str(e),
                    error_type=type(e).__name__
                )
                raise PersistenceError(
                    f"Malformed team row in {self.config.teams_table}: {e!r}",
                    operation="list_submissions",
                    target=self.config.teams_table,
                    context={"contest_id": contest_id}
                ) from e
        return submissions

    def _decode_team(self, team: dict[str, Any], contest_id: str) -> Submission:
        tokens = sorted(team.get(self.config.selections_table) or [],
                        key=lambda row: row.get('position', 0))
        return Submission(
            submission_id=str(team['id']),
            contest_id=str(team.get('contest_id', contest_id)),
            owner_identity=team.get('wallet_address', ""),
            selections=tuple(
                Selection(
                    asset=Asset(
                        id=row.get('asset_id') or row['token_symbol'],
                        symbol=row['token_symbol'],
                        name=row['token_name'],
                        image=row.get('logo_url') or None,
                    ),
                    prediction=Prediction.parse(row.get('prediction', 'up')),
                )
                for row in tokens
            ),
            submitted_at=self._created_at(team),
            team_name=team.get('team_name') or "",
        )

    def health_check(self) -> bool:
        try:
            self._request('GET', self._table_url(self.config.teams_table, "select=id&limit=1"))
            return True
        except PersistenceError as e:
            self.logger.warning("Health check failed", error=str(e))
            return False
