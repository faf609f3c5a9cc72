"""Tests for the PostgREST submission gateway."""

import io
import json
from unittest.mock import MagicMock, patch
from urllib.error import HTTPError, URLError

import pytest

from conftest import WALLET
from leagues_app.config.persistence import RestGatewayConfig
from leagues_app.data.models import Asset, Prediction, Selection
from leagues_app.errors import ConfigurationError, PartialSubmissionError, PersistenceError
from leagues_app.persistence.rest_gateway import RestSubmissionGateway

ROSTER = (
    Selection(Asset("bitcoin", "btc", "Bitcoin", "https://img/btc.png"), Prediction.UP),
    Selection(Asset("ethereum", "eth", "Ethereum", None), Prediction.DOWN),
)


def response(payload, code=201):
    mock = MagicMock()
    mock.getcode.return_value = code
    mock.read.return_value = json.dumps(payload).encode('utf-8') if payload is not None else b""
    mock.__enter__.return_value = mock
    mock.__exit__.return_value = False
    return mock


def http_error(code, reason="Bad Request"):
    return HTTPError("https://db.example/rest/v1/x", code, reason, {}, io.BytesIO(b""))


@pytest.fixture
def gateway():
    return RestSubmissionGateway(RestGatewayConfig(base_url="https://db.example", api_key="anon-key"))


class TestRestGatewayConfig:
    """Test configuration from the environment."""

    def test_from_env(self):
        config = RestGatewayConfig.from_env({"SUPABASE_URL": "https://db.example/", "SUPABASE_KEY": "k"})

        assert config.base_url == "https://db.example"
        assert config.api_key == "k"

    def test_from_env_missing(self):
        with pytest.raises(ConfigurationError) as exc_info:
            RestGatewayConfig.from_env({"SUPABASE_URL": "https://db.example"})

        assert exc_info.value.context["missing"] == ["SUPABASE_KEY"]

    def test_invalid_url(self):
        with pytest.raises(ConfigurationError):
            RestSubmissionGateway(RestGatewayConfig(base_url="not a url", api_key="k"))


class TestSaveSubmission:
    """Test the two-step insert."""

    @patch('leagues_app.persistence.rest_gateway.urlopen')
    def test_success(self, mock_urlopen, gateway):
        mock_urlopen.side_effect = [
            response([{"id": "team-1", "created_at": "2026-01-01T12:00:00Z"}]),
            response([{"position": 0}, {"position": 1}]),
        ]

        submission = gateway.save_submission(ROSTER, "7", WALLET, team_name="Alpha")

        assert submission.submission_id == "team-1"
        assert submission.contest_id == "7"
        assert submission.selections == ROSTER
        assert submission.submitted_at.year == 2026

        team_req, tokens_req = [call.args[0] for call in mock_urlopen.call_args_list]
        assert team_req.full_url == "https://db.example/rest/v1/teams"
        assert team_req.get_header('Apikey') == "anon-key"
        assert team_req.get_header('Prefer') == "return=representation"
        assert json.loads(team_req.data) == {
            "wallet_address": WALLET, "team_name": "Alpha", "contest_id": "7"
        }

        rows = json.loads(tokens_req.data)
        assert [r["position"] for r in rows] == [0, 1]
        assert [r["prediction"] for r in rows] == ["up", "down"]
        assert all(r["team_id"] == "team-1" for r in rows)

    @patch('leagues_app.persistence.rest_gateway.urlopen')
    def test_parent_insert_failure(self, mock_urlopen, gateway):
        mock_urlopen.side_effect = http_error(401, "Unauthorized")

        with pytest.raises(PersistenceError) as exc_info:
            gateway.save_submission(ROSTER, "7", WALLET)

        assert not isinstance(exc_info.value, PartialSubmissionError)
        assert mock_urlopen.call_count == 1

    @patch('leagues_app.persistence.rest_gateway.urlopen')
    def test_missing_team_id(self, mock_urlopen, gateway):
        mock_urlopen.return_value = response([])

        with pytest.raises(PersistenceError, match="team ID"):
            gateway.save_submission(ROSTER, "7", WALLET)

    @patch('leagues_app.persistence.rest_gateway.urlopen')
    def test_child_failure_deletes_parent(self, mock_urlopen, gateway):
        mock_urlopen.side_effect = [
            response([{"id": "team-1"}]),
            http_error(500, "Internal Server Error"),
            response(None, code=204),
        ]

        with pytest.raises(PartialSubmissionError) as exc_info:
            gateway.save_submission(ROSTER, "7", WALLET)

        assert exc_info.value.context["rolled_back"] is True
        delete_req = mock_urlopen.call_args_list[2].args[0]
        assert delete_req.get_method() == "DELETE"
        assert delete_req.full_url == "https://db.example/rest/v1/teams?id=eq.team-1"

    @patch('leagues_app.persistence.rest_gateway.urlopen')
    def test_short_child_insert_detected(self, mock_urlopen, gateway):
        mock_urlopen.side_effect = [
            response([{"id": "team-1"}]),
            response([{"position": 0}]),
            response(None, code=204),
        ]

        with pytest.raises(PartialSubmissionError) as exc_info:
            gateway.save_submission(ROSTER, "7", WALLET)

        assert exc_info.value.expected_rows == 2
        assert exc_info.value.stored_rows == 1
        assert exc_info.value.context["rolled_back"] is True

    @patch('leagues_app.persistence.rest_gateway.urlopen')
    def test_failed_rollback_reported(self, mock_urlopen, gateway):
        mock_urlopen.side_effect = [
            response([{"id": "team-1"}]),
            URLError("connection reset"),
            URLError("connection reset"),
        ]

        with pytest.raises(PartialSubmissionError) as exc_info:
            gateway.save_submission(ROSTER, "7", WALLET)

        assert exc_info.value.context["rolled_back"] is False


class TestListSubmissions:
    """Test reading submissions back."""

    @patch('leagues_app.persistence.rest_gateway.urlopen')
    def test_list_orders_selections_by_position(self, mock_urlopen, gateway):
        mock_urlopen.return_value = response([
            {
                "id": "team-1",
                "contest_id": "7",
                "wallet_address": WALLET,
                "team_name": "Alpha",
                "created_at": "2026-01-01T12:00:00+00:00",
                "team_tokens": [
                    {"asset_id": "ethereum", "token_symbol": "eth", "token_name": "Ethereum",
                     "logo_url": "", "prediction": "down", "position": 1},
                    {"asset_id": "bitcoin", "token_symbol": "btc", "token_name": "Bitcoin",
                     "logo_url": "https://img/btc.png", "prediction": "up", "position": 0},
                ],
            }
        ], code=200)

        submissions = gateway.list_submissions("7")

        assert len(submissions) == 1
        assert submissions[0].selections == ROSTER
        assert submissions[0].asset_names == ("Bitcoin", "Ethereum")
        request = mock_urlopen.call_args.args[0]
        assert "contest_id=eq.7" in request.full_url

    @pytest.mark.parametrize("team", [
        {"contest_id": "7", "team_tokens": []},
        {"id": "team-1", "team_tokens": [{"token_name": "Bitcoin", "position": 0}]},
        {"id": "team-1", "team_tokens": [
            {"token_symbol": "btc", "token_name": "Bitcoin", "prediction": "sideways"}]},
        {"id": "team-1", "created_at": "not a timestamp", "team_tokens": []},
        "team-1",
    ])
    @patch('leagues_app.persistence.rest_gateway.urlopen')
    def test_malformed_row_raises_persistence_error(self, mock_urlopen, team, gateway):
        mock_urlopen.return_value = response([team], code=200)

        with pytest.raises(PersistenceError) as exc_info:
            gateway.list_submissions("7")

        assert exc_info.value.operation == "list_submissions"
        assert exc_info.value.target == "teams"
        assert isinstance(exc_info.value.__cause__, (KeyError, ValueError, TypeError, AttributeError))

    @patch('leagues_app.persistence.rest_gateway.urlopen')
    def test_health_check_failure(self, mock_urlopen, gateway):
        mock_urlopen.side_effect = URLError("unreachable")

        assert gateway.health_check() is False
