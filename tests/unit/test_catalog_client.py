"""Unit tests for the remote catalog client."""

from unittest.mock import MagicMock

import pytest
import requests

from mastery.errors import NetworkError, ProtocolError
from mastery.services.catalog_client import CatalogClient


def make_response(status_code=200, payload=None, json_error=None):
    response = MagicMock()
    response.status_code = status_code
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


def make_client(response=None, side_effect=None):
    session = MagicMock()
    if side_effect is not None:
        session.post.side_effect = side_effect
    else:
        session.post.return_value = response
    return CatalogClient(api_url="https://example.test/graphql", timeout=5, session=session), session


def questions_payload(questions):
    return {"data": {"problemsetQuestionListV2": {"questions": questions}}}


def test_fetch_page_maps_questions_to_items():
    payload = questions_payload([
        {
            "title": "Two Sum",
            "titleSlug": "two-sum",
            "difficulty": "EASY",
            "topicTags": [{"name": "Array"}, {"name": "Hash Table"}],
            "frontendQuestionId": "1",
        }
    ])
    client, session = make_client(make_response(payload=payload))

    items = client.fetch_page(100, 200)

    assert items == [{
        "title": "Two Sum",
        "slug": "two-sum",
        "difficulty": "EASY",
        "topicTags": ["Array", "Hash Table"],
        "frontendId": "1",
    }]
    _, kwargs = session.post.call_args
    assert kwargs["json"]["variables"] == {"limit": 100, "skip": 200}
    assert kwargs["timeout"] == 5


def test_empty_page_signals_end_of_catalog():
    client, _ = make_client(make_response(payload=questions_payload([])))

    assert client.fetch_page(100, 5000) == []


def test_graphql_errors_raise_protocol_error():
    payload = {"errors": [{"message": "Cannot query field"}], "data": None}
    client, _ = make_client(make_response(payload=payload))

    with pytest.raises(ProtocolError) as exc_info:
        client.fetch_page(100, 300)

    assert exc_info.value.offset == 300


def test_missing_question_list_raises_protocol_error():
    client, _ = make_client(make_response(payload={"data": {"somethingElse": {}}}))

    with pytest.raises(ProtocolError):
        client.fetch_page(100, 0)


def test_connection_failure_raises_network_error():
    client, _ = make_client(side_effect=requests.ConnectionError("connection refused"))

    with pytest.raises(NetworkError) as exc_info:
        client.fetch_page(100, 100)

    assert exc_info.value.offset == 100


def test_non_200_status_raises_network_error():
    client, _ = make_client(make_response(status_code=503))

    with pytest.raises(NetworkError):
        client.fetch_page(100, 0)


def test_invalid_json_raises_network_error():
    client, _ = make_client(make_response(json_error=ValueError("Expecting value")))

    with pytest.raises(NetworkError):
        client.fetch_page(100, 0)


@pytest.mark.parametrize("page_size, offset", [(0, 0), (-5, 0), (100, -1)])
def test_invalid_arguments_are_rejected(page_size, offset):
    client, session = make_client(make_response(payload=questions_payload([])))

    with pytest.raises(ValueError):
        client.fetch_page(page_size, offset)

    session.post.assert_not_called()


def test_close_releases_the_session():
    client, session = make_client(make_response(payload=questions_payload([])))

    client.close()

    session.close.assert_called_once()
