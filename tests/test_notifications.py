from factories import admin_at, make_ticket, visitor_at
from kiosk.tickets.notifications import has_unseen_visitor_activity


def test_no_messages_has_no_activity():
    assert not has_unseen_visitor_activity(make_ticket())


def test_visitor_message_without_admin_reply_is_unseen():
    assert has_unseen_visitor_activity(make_ticket(messages=(visitor_at(1),)))


def test_admin_reply_after_visitor_clears_flag():
    assert not has_unseen_visitor_activity(make_ticket(messages=(visitor_at(1), admin_at(2))))


def test_visitor_after_latest_admin_sets_flag():
    ticket = make_ticket(messages=(admin_at(1), visitor_at(2), admin_at(3), visitor_at(4)))

    assert has_unseen_visitor_activity(ticket)


def test_equal_timestamp_is_not_unseen():
    assert not has_unseen_visitor_activity(make_ticket(messages=(admin_at(2), visitor_at(2))))
