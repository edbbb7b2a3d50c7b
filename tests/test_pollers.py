# tests/test_pollers.py
import pytest

from juice_monitor.alerts import templates
from juice_monitor.categories import EventCategory as C, Feed, categories_for
from juice_monitor.feeds import CategoryQuery, FeedQueryError, RequestsGraphQLClient, SourcePoller, queries
from juice_monitor.feeds.base import single
from juice_monitor.feeds.juicedollar import JUICEDOLLAR_QUERIES, build_juicedollar_poller
from juice_monitor.feeds.juiceswap import JUICESWAP_QUERIES, build_juiceswap_poller
from juice_monitor.state.store import initialize_watermarks

EXPLORER = "https://citreascan.com"


class FakeClient:
    """Answers by query document; anything unknown returns an empty page."""

    def __init__(self, pages=None, failing=()):
        self.pages = pages or {}
        self.failing = set(failing)
        self.calls = []

    def query(self, document, variables):
        self.calls.append((document, dict(variables)))
        if document in self.failing:
            raise FeedQueryError("boom")
        root, items = self.pages.get(document, (None, []))
        if root is None:
            # any root works for an empty page; pick the one the poller asks for
            for q in JUICESWAP_QUERIES + JUICEDOLLAR_QUERIES:
                if q.document == document:
                    root = q.root_field
        return {root: {"items": items}}


@pytest.fixture
def wm():
    return initialize_watermarks("0")


def test_query_sets_cover_each_feed_exactly():
    swap = {c for q in JUICESWAP_QUERIES for c in q.advanced_categories}
    dollar = {c for q in JUICEDOLLAR_QUERIES for c in q.advanced_categories}
    assert len(JUICESWAP_QUERIES) == 8
    assert len(JUICEDOLLAR_QUERIES) == 13
    assert swap == set(categories_for(Feed.JUICESWAP))
    assert dollar == set(categories_for(Feed.JUICEDOLLAR))


def test_empty_pages_yield_nothing(wm):
    result = build_juicedollar_poller(FakeClient()).poll(wm, EXPLORER)
    assert result.alerts == []
    assert result.watermark_updates == {}
    assert result.query_failures == 0


def test_watermark_is_passed_as_variable(wm):
    wm[C.EMERGENCY_STOP] = "1700000000"
    client = FakeClient()
    build_juicedollar_poller(client).poll(wm, EXPLORER)
    sent = dict(client.calls)
    assert sent[queries.EMERGENCY_STOPPEDS] == {"watermark": "1700000000"}
    assert sent[queries.MINTERS_NEW] == {"watermark": "0"}


def test_minter_application_without_deny_alerts(wm):
    client = FakeClient({queries.MINTERS_NEW: ("minters", [
        {"minter": "0x1111111111111111111111111111111111111111", "applyDate": "1700000000",
         "applicationPeriod": "864000", "applyMessage": "hi", "denyDate": None, "txHash": "0xabc"},
    ])})

    result = build_juicedollar_poller(client).poll(wm, EXPLORER)

    assert [a.category for a in result.alerts] == [C.MINTER_APPLICATION]
    assert result.watermark_updates == {C.MINTER_APPLICATION: "1700000000"}


def test_denied_minter_application_advances_without_alert(wm):
    client = FakeClient({queries.MINTERS_NEW: ("minters", [
        {"minter": "0x1111111111111111111111111111111111111111", "applyDate": "1700000000",
         "denyDate": "1700000500", "txHash": "0xabc"},
    ])})

    result = build_juicedollar_poller(client).poll(wm, EXPLORER)

    assert result.alerts == []
    assert result.watermark_updates == {C.MINTER_APPLICATION: "1700000000"}


def test_candidate_comes_from_last_item(wm):
    client = FakeClient({queries.CHALLENGE_V2S: ("challengeV2s", [
        {"position": "0xaaaa", "number": "1", "created": "1700000001", "txHash": "0x1"},
        {"position": "0xbbbb", "number": "2", "created": "1700000009", "txHash": "0x2"},
    ])})

    result = build_juicedollar_poller(client).poll(wm, EXPLORER)

    assert len(result.alerts) == 2
    assert result.watermark_updates[C.CHALLENGE_STARTED] == "1700000009"


def test_last_item_without_cursor_gives_no_candidate(wm):
    client = FakeClient({queries.FORCED_SALES: ("forcedSales", [
        {"position": "0xaaaa", "amount": "1", "txHash": "0x1"},
    ])})
    result = build_juicedollar_poller(client).poll(wm, EXPLORER)
    assert len(result.alerts) == 1
    assert C.FORCED_LIQUIDATION not in result.watermark_updates


def test_resolved_proposals_split_by_status_and_advance_both(wm):
    client = FakeClient({queries.GOVERNOR_PROPOSALS_RESOLVED: ("governorProposals", [
        {"proposalId": "1", "status": "executed", "resolvedAt": "1700000010", "txHash": "0x1"},
        {"proposalId": "2", "status": "vetoed", "resolvedAt": "1700000020", "txHash": "0x2"},
    ])})

    result = build_juiceswap_poller(client).poll(wm, EXPLORER)

    assert [a.category for a in result.alerts] == [C.GOVERNOR_PROPOSAL_EXECUTED, C.GOVERNOR_PROPOSAL_VETOED]
    assert result.watermark_updates == {
        C.GOVERNOR_PROPOSAL_EXECUTED: "1700000020",
        C.GOVERNOR_PROPOSAL_VETOED: "1700000020",
    }


def test_one_failing_query_does_not_block_siblings(wm):
    client = FakeClient(
        pages={queries.EMERGENCY_STOPPEDS: ("emergencyStoppeds", [
            {"bridgeAddress": "0xbridge", "caller": "0xcaller", "message": "halt",
             "timestamp": "1700000100", "txHash": "0x9"},
        ])},
        failing={queries.POSITION_V2S_NEW},
    )

    result = build_juicedollar_poller(client).poll(wm, EXPLORER)

    assert result.query_failures == 1
    assert [a.category for a in result.alerts] == [C.EMERGENCY_STOP]
    assert C.NEW_ORIGINAL_POSITION not in result.watermark_updates
    assert result.watermark_updates[C.EMERGENCY_STOP] == "1700000100"


def test_out_of_range_timestamp_does_not_break_the_feed(wm):
    client = FakeClient({
        queries.GOVERNOR_PROPOSALS_NEW: ("governorProposals", [
            {"proposalId": "3", "executeAfter": "99999999999999999", "createdAt": "1700000001",
             "description": "far future", "txHash": "0x1"},
        ]),
        queries.FACTORY_OWNER_CHANGES: ("factoryOwnerChanges", [
            {"oldOwner": "0xold", "newOwner": "0xnew", "blockTimestamp": "1700000002", "txHash": "0x2"},
        ]),
    })

    result = build_juiceswap_poller(client).poll(wm, EXPLORER)

    assert result.query_failures == 0
    assert [a.category for a in result.alerts] == [C.GOVERNOR_PROPOSAL_CREATED, C.FACTORY_OWNER_CHANGED]
    assert "Auto-executes: N/A" in result.alerts[0].message
    assert result.watermark_updates == {
        C.GOVERNOR_PROPOSAL_CREATED: "1700000001",
        C.FACTORY_OWNER_CHANGED: "1700000002",
    }


def test_render_error_is_isolated_to_its_category(wm):
    def explode(item, explorer_url):
        raise KeyError("missing field")

    queries_ = [
        CategoryQuery(C.FORCED_LIQUIDATION, queries.FORCED_SALES, "forcedSales", explode),
        CategoryQuery(C.EMERGENCY_STOP, queries.EMERGENCY_STOPPEDS, "emergencyStoppeds",
                      single(C.EMERGENCY_STOP, templates.emergency_stop)),
    ]
    client = FakeClient({
        queries.FORCED_SALES: ("forcedSales", [{"position": "0xaaaa", "timestamp": "5", "txHash": "0x1"}]),
        queries.EMERGENCY_STOPPEDS: ("emergencyStoppeds", [
            {"bridgeAddress": "0xb", "caller": "0xc", "message": "m", "timestamp": "6", "txHash": "0x2"},
        ]),
    })

    result = SourcePoller(Feed.JUICEDOLLAR, client, queries_).poll(wm, EXPLORER)

    assert result.query_failures == 1
    assert [a.category for a in result.alerts] == [C.EMERGENCY_STOP]
    assert result.watermark_updates == {C.EMERGENCY_STOP: "6"}


def test_emergency_stop_message_is_escaped(wm):
    client = FakeClient({queries.EMERGENCY_STOPPEDS: ("emergencyStoppeds", [
        {"bridgeAddress": "0xbridge", "caller": "0xcaller", "message": "<script>&",
         "timestamp": "1", "txHash": "0x9"},
    ])})
    alert = build_juicedollar_poller(client).poll(wm, EXPLORER).alerts[0]
    assert "&lt;script&gt;&amp;" in alert.message
    assert alert.silent is False
    assert f"{EXPLORER}/tx/0x9" in alert.message


# ---- RequestsGraphQLClient -------------------------------------------------

def test_client_returns_data(fake_session, fake_response):
    session = fake_session([fake_response(200, {"data": {"minters": {"items": []}}})])
    client = RequestsGraphQLClient("https://dollar.example/graphql", session=session)

    assert client.query("query X { x }", {"watermark": "0"}) == {"minters": {"items": []}}
    call = session.calls[0]
    assert call["json"] == {"query": "query X { x }", "variables": {"watermark": "0"}}
    assert call["timeout"] == 30


@pytest.mark.parametrize("response", [
    {"errors": [{"message": "bad field"}]},
    {"data": None},
    ["not", "an", "object"],
])
def test_client_raises_on_graphql_failures(fake_session, fake_response, response):
    client = RequestsGraphQLClient("u", session=fake_session([fake_response(200, response)]))
    with pytest.raises(FeedQueryError):
        client.query("q", {})


def test_client_raises_on_http_error(fake_session, fake_response):
    client = RequestsGraphQLClient("u", session=fake_session([fake_response(503, {})]))
    with pytest.raises(FeedQueryError):
        client.query("q", {})
