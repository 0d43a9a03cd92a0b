import unittest

from marbles.clock import VirtualClock
from marbles.contracts import Notification
from marbles.factories import cold_stream, hot_stream
from marbles.parser import ParseError
from marbles.recorder import NotificationRecorder


class TestColdStream(unittest.TestCase):
    def test_each_subscription_replays_from_its_own_start(self) -> None:
        clock = VirtualClock()
        stream = cold_stream(clock, "-a-|", {"a": 1})
        first = NotificationRecorder(clock)
        second = NotificationRecorder(clock)

        stream.subscribe(first)
        clock.advance_to(2)
        stream.subscribe(second)
        clock.flush()

        self.assertEqual(first.records, [Notification.next(1, 1), Notification.complete(3)])
        self.assertEqual(second.records, [Notification.next(3, 1), Notification.complete(5)])
        self.assertEqual(stream.subscription_count(), 2)
        self.assertEqual(stream.subscription_frames, [0, 2])

    def test_cancel_drops_scheduled_events(self) -> None:
        clock = VirtualClock()
        stream = cold_stream(clock, "-a-b-|")
        recorder = NotificationRecorder(clock)

        subscription = stream.subscribe(recorder)
        clock.advance_to(2)
        subscription.cancel()
        clock.flush()

        self.assertEqual(recorder.values(), ["a"])
        self.assertEqual(clock.pending_count(), 0)

    def test_group_emits_in_one_frame(self) -> None:
        clock = VirtualClock()
        recorder = NotificationRecorder(clock)
        cold_stream(clock, "-(ab|)").subscribe(recorder)
        clock.flush()

        self.assertEqual(
            recorder.records,
            [Notification.next(1, "a"), Notification.next(1, "b"), Notification.complete(1)],
        )

    def test_error_payload(self) -> None:
        clock = VirtualClock()
        recorder = NotificationRecorder(clock)
        cold_stream(clock, "--#", error="oops").subscribe(recorder)
        clock.flush()

        self.assertEqual(recorder.records, [Notification.error(2, "oops")])

    def test_subscription_point_rejected(self) -> None:
        with self.assertRaises(ParseError):
            cold_stream(VirtualClock(), "-^-a|")


class TestHotStream(unittest.TestCase):
    def test_late_subscriber_misses_earlier_emissions(self) -> None:
        clock = VirtualClock()
        stream = hot_stream(clock, "-a-b-c|")
        early = NotificationRecorder(clock)
        late = NotificationRecorder(clock)

        stream.subscribe(early)
        clock.advance_to(2)
        stream.subscribe(late)
        clock.flush()

        self.assertEqual(early.values(), ["a", "b", "c"])
        self.assertEqual(late.records, [
            Notification.next(3, "b"),
            Notification.next(5, "c"),
            Notification.complete(6),
        ])
        self.assertEqual(stream.subscription_count(), 2)

    def test_events_before_caret_are_not_replayed(self) -> None:
        clock = VirtualClock()
        stream = hot_stream(clock, "a-^-b|")
        recorder = NotificationRecorder(clock)

        stream.subscribe(recorder)
        clock.flush()

        self.assertEqual(recorder.records, [Notification.next(2, "b"), Notification.complete(3)])

    def test_anchor_is_creation_time(self) -> None:
        clock = VirtualClock()
        clock.advance_to(10)
        stream = hot_stream(clock, "^-a|")
        recorder = NotificationRecorder(clock)

        stream.subscribe(recorder)
        clock.flush()

        self.assertEqual(recorder.records, [Notification.next(12, "a"), Notification.complete(13)])

    def test_disconnect_stops_emissions(self) -> None:
        clock = VirtualClock()
        stream = hot_stream(clock, "-a-b|")
        recorder = NotificationRecorder(clock)
        stream.subscribe(recorder)

        clock.advance_to(2)
        stream.disconnect()
        clock.flush()

        self.assertEqual(recorder.values(), ["a"])
        self.assertEqual(clock.pending_count(), 0)

    def test_overlapping_hot_streams_resolve_in_creation_order(self) -> None:
        clock = VirtualClock()
        first = hot_stream(clock, "-a|")
        second = hot_stream(clock, "-b|")
        seen = []
        second.subscribe(seen.append)
        first.subscribe(seen.append)

        clock.flush()

        self.assertEqual(seen, ["a", "b"])


if __name__ == "__main__":
    unittest.main()
