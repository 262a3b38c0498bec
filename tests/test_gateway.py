from unittest.mock import MagicMock, patch
from urllib.parse import parse_qs, urlparse

import pytest
import requests

from clubexpress_courts import gateway


@pytest.fixture
def mock_response():
    mock = MagicMock()
    mock.status_code = 200
    mock.json.return_value = {"firstTS": 100, "displayDate": "Monday, June 10, 2024", "resources": []}
    return mock


@pytest.fixture
def mock_scraper_obj(mock_response):
    s = MagicMock()
    s.get.return_value = mock_response
    return s


def test_build_url():
    client = gateway.GridClient(base_url="https://club.example.com/")
    url = client.build_url("1196", 3)

    parsed = urlparse(url)
    qs = parse_qs(parsed.query)
    assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == "https://club.example.com/handlers/res_sched.ashx"
    assert qs["type"] == ["g"]
    assert qs["cat"] == ["1196"]
    assert qs["d"] == ["3"]
    assert "_" in qs


@patch("clubexpress_courts.gateway.cloudscraper.create_scraper")
def test_fetch_grid_success(mock_create_scraper, mock_scraper_obj):
    mock_create_scraper.return_value = mock_scraper_obj
    client = gateway.GridClient()

    data = client.fetch_grid("1196", 0)

    assert data["firstTS"] == 100
    mock_scraper_obj.get.assert_called_once()
    _, kwargs = mock_scraper_obj.get.call_args
    assert kwargs["timeout"] == client.timeout


@patch("clubexpress_courts.gateway.cloudscraper.create_scraper")
def test_fetch_grid_reuses_scraper(mock_create_scraper, mock_scraper_obj):
    mock_create_scraper.return_value = mock_scraper_obj
    client = gateway.GridClient()

    client.fetch_grid("1196", 0)
    client.fetch_grid("1196", 1)

    mock_create_scraper.assert_called_once()
    assert mock_scraper_obj.get.call_count == 2


@patch("clubexpress_courts.gateway.cloudscraper.create_scraper")
def test_fetch_grid_passes_transport_errors_through(mock_create_scraper, mock_scraper_obj):
    mock_create_scraper.return_value = mock_scraper_obj
    error = requests.exceptions.ConnectionError("Network error")
    mock_scraper_obj.get.side_effect = error

    with pytest.raises(requests.exceptions.ConnectionError) as exc:
        gateway.GridClient().fetch_grid("1196", 0)

    assert exc.value is error


@patch("clubexpress_courts.gateway.cloudscraper.create_scraper")
def test_fetch_grid_raises_on_http_error(mock_create_scraper, mock_scraper_obj, mock_response):
    mock_create_scraper.return_value = mock_scraper_obj
    mock_response.status_code = 403
    mock_response.raise_for_status.side_effect = requests.exceptions.HTTPError("403 Forbidden")

    with pytest.raises(requests.exceptions.HTTPError):
        gateway.GridClient().fetch_grid("1196", 0)
