"""Tests for Notifier."""

from marketplace_chat.core.exceptions import ValidationError
from marketplace_chat.models.notification import NotificationVariant
from marketplace_chat.services.notification_service import MAX_NOTIFICATIONS, Notifier


def test_history_keeps_only_recent_notifications():
    notifier = Notifier(max_notifications=3)

    for index in range(5):
        notifier.notify("Aviso", f"n{index}")

    assert [n.description for n in notifier.notifications] == ["n2", "n3", "n4"]
    assert notifier.last.description == "n4"


def test_default_history_is_bounded():
    notifier = Notifier()

    for index in range(MAX_NOTIFICATIONS + 10):
        notifier.notify_error(f"falha {index}")

    assert len(notifier.notifications) == MAX_NOTIFICATIONS


def test_listener_receives_every_notification():
    received = []
    notifier = Notifier(listener=received.append, max_notifications=1)

    notifier.notify("Aviso", "primeiro")
    notifier.notify_validation(ValidationError("Quantidade inválida"))

    assert [n.description for n in received] == ["primeiro", "Quantidade inválida"]
    assert received[1].variant == NotificationVariant.DESTRUCTIVE


def test_clear_and_last():
    notifier = Notifier()
    assert notifier.last is None

    notifier.notify("Aviso", "x")
    notifier.clear()

    assert notifier.last is None
