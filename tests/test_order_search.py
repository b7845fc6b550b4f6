import asyncio

from services.order_search import MSG_BLANK, MSG_NOT_FOUND, OrderSearch


def test_blank_number_does_not_hit_backend(requests_mock):
    search = OrderSearch()
    assert asyncio.run(search.search_by_number("   ")) is None
    assert search.error == MSG_BLANK
    assert not requests_mock.called


def test_found_number_is_trimmed(requests_mock, api_url, order_json):
    body = order_json()
    requests_mock.get(f"{api_url}/orders/number/{body['orderNumber']}", json=body)
    search = OrderSearch()

    order = asyncio.run(search.search_by_number(f"  {body['orderNumber']} "))

    assert order.id == body["id"]
    assert search.result is order
    assert search.error is None
    assert search.searching is False


def test_not_found(requests_mock, api_url):
    requests_mock.get(f"{api_url}/orders/number/ORD-X", status_code=404, reason="Not Found")
    search = OrderSearch()
    asyncio.run(search.search_by_number("ORD-X"))
    assert search.result is None
    assert search.error == MSG_NOT_FOUND
    assert search.api_error.status == 404


def test_other_errors_use_normalized_message(requests_mock, api_url):
    requests_mock.get(f"{api_url}/orders/number/ORD-X", status_code=500, reason="Internal Server Error",
                      json={"message": "database unavailable"})
    search = OrderSearch()
    asyncio.run(search.search_by_number("ORD-X"))
    assert search.error == "database unavailable"

    search.clear()
    assert search.error is None
    assert search.api_error is None
