from factories import admin_at, make_ticket, visitor_at
from kiosk.tickets.conversation import merge_conversation, ticket_conversation
from kiosk.tickets.models import MessageOrigin, TicketMessage


def test_merge_orders_by_sent_at():
    admin = [admin_at(60, "Here is your badge info")]
    visitor = [visitor_at(59, "Hello?")]

    merged = merge_conversation(admin, visitor)

    assert [entry.origin for entry in merged] == [MessageOrigin.VISITOR, MessageOrigin.ADMIN]
    assert merged[0].text == "Hello?"


def test_equal_timestamps_list_admin_first():
    merged = merge_conversation([admin_at(5, "a")], [visitor_at(5, "v")])

    assert [entry.text for entry in merged] == ["a", "v"]


def test_same_origin_ties_keep_append_order():
    merged = merge_conversation([admin_at(5, "first"), admin_at(5, "second")], [])

    assert [entry.text for entry in merged] == ["first", "second"]


def test_entries_carry_citation_and_attachment():
    cited = TicketMessage.from_admin("See", sent_at=admin_at(1).sent_at, cited_url="https://example.com")
    photo = TicketMessage.from_visitor("Pic", sent_at=visitor_at(2).sent_at, attachment="/uploads/x.png")

    merged = merge_conversation([cited], [photo])

    assert merged[0].cited_url == "https://example.com"
    assert merged[1].attachment == "/uploads/x.png"


def test_ticket_conversation_does_not_mutate_ticket():
    ticket = make_ticket(messages=(visitor_at(3), admin_at(1)))
    before = ticket.messages

    merged = ticket_conversation(ticket)

    assert [entry.origin for entry in merged] == [MessageOrigin.ADMIN, MessageOrigin.VISITOR]
    assert ticket.messages is before
