"""Tests for the command slot rendezvous.

The slot is a capacity-one hand-off between the reader and executor
tasks.  It moves EMPTY → FILLED → CONSUMING → EMPTY, refuses out-of-turn
use, and wakes both sides when shutdown is requested.
"""

import threading

import pytest

from py_shell.errors import SlotStateError
from py_shell.slot import CommandSlot, SlotContents, SlotState

_TIMEOUT = 5.0


class TestStateMachine:
    """Verify single-threaded state transitions."""

    def test_starts_empty(self) -> None:
        """A new slot is EMPTY and not shutting down."""
        slot = CommandSlot()
        assert slot.state is SlotState.EMPTY
        assert slot.shutdown_requested is False

    def test_full_cycle(self) -> None:
        """publish → take → release walks the three states."""
        slot = CommandSlot()
        slot.publish(SlotContents(text="ls"))
        assert slot.state is SlotState.FILLED
        assert slot.take() == SlotContents(text="ls")
        assert slot.state is SlotState.CONSUMING
        slot.release()
        assert slot.state is SlotState.EMPTY

    def test_publish_twice_rejected(self) -> None:
        """The reader cannot publish over an unconsumed line."""
        slot = CommandSlot()
        slot.publish(SlotContents(text="a"))
        with pytest.raises(SlotStateError):
            slot.publish(SlotContents(text="b"))

    def test_release_without_take_rejected(self) -> None:
        """Only a taken slot can be released."""
        slot = CommandSlot()
        with pytest.raises(SlotStateError):
            slot.release()

    def test_clear_while_consuming_rejected(self) -> None:
        """The reader cannot clear the slot the executor owns."""
        slot = CommandSlot()
        slot.publish(SlotContents(text="a"))
        slot.take()
        with pytest.raises(SlotStateError):
            slot.clear()

    def test_take_after_shutdown_returns_none(self) -> None:
        """Once shutdown is requested, take returns None immediately."""
        slot = CommandSlot()
        slot.request_shutdown()
        assert slot.take() is None

    def test_overlong_flag_carried(self) -> None:
        """The overlong flag travels with the contents."""
        slot = CommandSlot()
        slot.publish(SlotContents(text="", overlong=True))
        contents = slot.take()
        assert contents is not None
        assert contents.overlong is True

    def test_repr(self) -> None:
        """repr shows the state."""
        assert "empty" in repr(CommandSlot())


class TestRendezvous:
    """Verify cross-thread hand-off."""

    def test_lines_delivered_in_order(self) -> None:
        """Every published line reaches the consumer, one at a time."""
        slot = CommandSlot()
        received: list[str] = []

        def consume() -> None:
            while (contents := slot.take()) is not None:
                received.append(contents.text)
                slot.release()

        consumer = threading.Thread(target=consume)
        consumer.start()
        for text in ("a", "b", "c"):
            slot.clear()
            slot.publish(SlotContents(text=text))
            slot.wait_until_consumed()
        slot.request_shutdown()
        consumer.join(_TIMEOUT)
        assert not consumer.is_alive()
        assert received == ["a", "b", "c"]

    def test_producer_blocks_until_release(self) -> None:
        """wait_until_consumed does not return while the line is owned."""
        slot = CommandSlot()
        slot.publish(SlotContents(text="a"))
        slot.take()
        done = threading.Event()

        def produce() -> None:
            slot.wait_until_consumed()
            done.set()

        producer = threading.Thread(target=produce)
        producer.start()
        assert not done.wait(0.2)
        slot.release()
        assert done.wait(_TIMEOUT)
        producer.join(_TIMEOUT)

    def test_shutdown_wakes_waiting_consumer(self) -> None:
        """A consumer blocked in take is released by shutdown."""
        slot = CommandSlot()
        results: list[SlotContents | None] = []
        consumer = threading.Thread(target=lambda: results.append(slot.take()))
        consumer.start()
        slot.request_shutdown()
        consumer.join(_TIMEOUT)
        assert results == [None]

    def test_shutdown_wakes_waiting_producer(self) -> None:
        """A producer blocked in wait_until_consumed is released by shutdown."""
        slot = CommandSlot()
        slot.publish(SlotContents(text="exit"))
        slot.take()
        producer = threading.Thread(target=slot.wait_until_consumed)
        producer.start()
        slot.request_shutdown()
        producer.join(_TIMEOUT)
        assert not producer.is_alive()
