"""
Tests for listings, category stats and the dashboard.
"""
from datetime import date, timedelta
from decimal import Decimal

from travelmgr.schemas.expense import ExpenseCreate, ExpenseUpdate
from travelmgr.schemas.itinerary import ItineraryCreate
from travelmgr.services import expense_service, itinerary_service, query_service

TODAY = date(2026, 10, 17)


def add_expense(db, owner, amount, on=TODAY, participants=(), category="Other", **kwargs):
    data = ExpenseCreate(
        title=f"{category} {amount}",
        amount=Decimal(amount),
        category=category,
        date=on,
        is_split=bool(participants),
        participants=list(participants),
        **kwargs,
    )
    return expense_service.create_expense(data, owner.id, db)


def add_trip(db, owner, start, members=()):
    data = ItineraryCreate(
        trip_name=f"Trip {start.isoformat()}",
        destination="Somewhere",
        start_date=start,
        end_date=start + timedelta(days=3),
        is_group_trip=bool(members),
        participants=list(members),
    )
    return itinerary_service.create_itinerary(data, owner.id, db)


def test_owner_listed_as_participant_appears_once(db, alice, bob):
    expense = add_expense(db, alice, "80", participants=[alice.id], paid_by=bob.id)

    visible = query_service.list_visible_expenses(alice.id, db)
    assert [e.id for e in visible] == [expense.id]
    assert query_service.list_visible_expenses(bob.id, db) == []


def test_expenses_sorted_newest_first(db, alice, bob):
    old = add_expense(db, alice, "10", on=TODAY - timedelta(days=3))
    new = add_expense(db, alice, "20", on=TODAY)
    shared = add_expense(db, bob, "30", on=TODAY - timedelta(days=1), participants=[alice.id])

    visible = query_service.list_visible_expenses(alice.id, db)
    assert [e.id for e in visible] == [new.id, shared.id, old.id]


def test_unsplit_expense_hidden_from_former_participants(db, alice, bob):
    expense = add_expense(db, bob, "60", participants=[alice.id])
    assert [e.id for e in query_service.list_visible_expenses(alice.id, db)] == [expense.id]

    expense_service.update_expense(expense.id, ExpenseUpdate(is_split=False), bob.id, db)
    assert query_service.list_visible_expenses(alice.id, db) == []


def test_itineraries_visible_to_members_only(db, alice, bob, carol):
    solo = add_trip(db, bob, TODAY + timedelta(days=10))
    group = add_trip(db, bob, TODAY + timedelta(days=20), members=[alice.id])
    own = add_trip(db, alice, TODAY + timedelta(days=5))

    assert [i.id for i in query_service.list_visible_itineraries(alice.id, db)] == [group.id, own.id]
    assert [i.id for i in query_service.list_visible_itineraries(bob.id, db)] == [group.id, solo.id]
    assert query_service.list_visible_itineraries(carol.id, db) == []


def test_stats_by_category(db, alice, bob, carol):
    add_expense(db, alice, "100", category="Food")
    add_expense(db, alice, "40", category="Food")
    add_expense(db, bob, "300", category="Accommodation", participants=[alice.id, carol.id])
    add_expense(db, carol, "999", category="Shopping")

    stats = query_service.stats_by_category(alice.id, db)
    assert stats == {"Food": Decimal("140"), "Accommodation": Decimal("100")}


def test_dashboard_summary(db, alice, bob):
    add_expense(db, alice, "100", on=TODAY - timedelta(days=2))
    add_expense(db, bob, "300", on=TODAY - timedelta(days=30), participants=[alice.id])
    add_trip(db, alice, TODAY + timedelta(days=7))
    add_trip(db, bob, TODAY - timedelta(days=60), members=[alice.id])

    summary = query_service.dashboard_summary(alice.id, db, today=TODAY)

    # 100 own + 150 as one of two heads on bob's expense
    assert summary["total_expenses"] == Decimal("250")
    assert summary["recent_expenses_total"] == Decimal("100")
    assert summary["total_trips"] == 2
    assert [i.start_date for i in summary["upcoming_trips"]] == [TODAY + timedelta(days=7)]
    assert len(summary["recent_expenses"]) == 2


def test_dashboard_lists_are_capped(db, alice):
    for offset in range(7):
        add_expense(db, alice, "1", on=TODAY - timedelta(days=offset))
        add_trip(db, alice, TODAY + timedelta(days=offset + 1))

    summary = query_service.dashboard_summary(alice.id, db, today=TODAY)
    assert len(summary["recent_expenses"]) == query_service.DASHBOARD_LIST_SIZE
    assert [i.start_date for i in summary["upcoming_trips"]] == [
        TODAY + timedelta(days=d) for d in range(1, 6)
    ]
    assert summary["total_trips"] == 7


# API

def test_dashboard_api(client, headers, alice, bob):
    client.post(
        "/api/expenses",
        json={"title": "Train", "amount": 1250.5, "category": "Transportation"},
        headers=headers(alice),
    )
    client.post(
        "/api/expenses",
        json={"title": "Dinner", "amount": 90, "is_split": True, "participants": [alice.id]},
        headers=headers(bob),
    )

    response = client.get("/api/dashboard", headers=headers(alice))
    assert response.status_code == 200
    body = response.json()
    assert Decimal(body["total_expenses"]) == Decimal("1295.50")
    assert body["total_expenses_display"] == "₹1,295.50"
    assert body["total_trips"] == 0
    assert len(body["recent_expenses"]) == 2


def test_category_stats_api(client, headers, alice):
    client.post("/api/expenses", json={"title": "Bus", "amount": 12, "category": "Transportation"},
                headers=headers(alice))
    response = client.get("/api/expenses/stats/category", headers=headers(alice))
    assert response.status_code == 200
    assert {k: Decimal(v) for k, v in response.json().items()} == {"Transportation": Decimal("12")}


def test_list_expenses_api_shows_my_share(client, headers, alice, bob, carol):
    client.post(
        "/api/expenses",
        json={"title": "Villa", "amount": 300, "is_split": True, "participants": [alice.id, carol.id]},
        headers=headers(bob),
    )
    response = client.get("/api/expenses", headers=headers(alice))
    assert response.status_code == 200
    [expense] = response.json()
    assert Decimal(expense["my_share"]) == Decimal("100")
    assert expense["paid_by"]["name"] == "Bob"
