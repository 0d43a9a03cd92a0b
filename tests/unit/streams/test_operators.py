import random
import unittest

from streams import operators
from streams.stream import Stream
from streams.subscriber import SubscriptionRuntimeError


class Recorder:
    def __init__(self) -> None:
        self.events = []

    def next(self, value) -> None:
        self.events.append(("next", value))

    def error(self, err) -> None:
        self.events.append(("error", err))

    def complete(self) -> None:
        self.events.append(("complete", None))


def collect(stream):
    recorder = Recorder()
    stream.subscribe(recorder)
    return recorder.events


def misbehaving(subscriber):
    subscriber.next(1)
    subscriber.complete()
    subscriber.next(2)
    subscriber.error("late")


class TestMap(unittest.TestCase):
    def test_projects_values(self) -> None:
        events = collect(operators.of(1, 2, 3).pipe(operators.map(lambda v: v * 2)))
        self.assertEqual(events, [("next", 2), ("next", 4), ("next", 6), ("complete", None)])

    def test_raising_projection_becomes_error(self) -> None:
        events = collect(operators.of(1, 0, 2).pipe(operators.map(lambda v: 1 / v)))

        self.assertEqual(events[0], ("next", 1.0))
        kind, err = events[1]
        self.assertEqual(kind, "error")
        self.assertIsInstance(err, SubscriptionRuntimeError)
        self.assertEqual(err.stage, "map")
        self.assertIsInstance(err.cause, ZeroDivisionError)
        self.assertEqual(len(events), 2)

    def test_no_emission_after_terminal(self) -> None:
        events = collect(Stream(misbehaving).pipe(operators.map(lambda v: v * 10)))
        self.assertEqual(events, [("next", 10), ("complete", None)])


class TestFilter(unittest.TestCase):
    def test_keeps_truthy(self) -> None:
        events = collect(operators.of(1, 2, 3, 4).pipe(operators.filter(lambda v: v % 2 == 0)))
        self.assertEqual(events, [("next", 2), ("next", 4), ("complete", None)])

    def test_raising_predicate_becomes_error(self) -> None:
        events = collect(operators.of("a", None).pipe(operators.filter(lambda v: v.isalpha())))

        self.assertEqual(events[0], ("next", "a"))
        self.assertEqual(events[1][0], "error")
        self.assertEqual(events[1][1].stage, "filter")

    def test_no_emission_after_terminal(self) -> None:
        events = collect(Stream(misbehaving).pipe(operators.filter(lambda v: True)))
        self.assertEqual(events, [("next", 1), ("complete", None)])

    def test_error_is_forwarded(self) -> None:
        def producer(subscriber):
            subscriber.next("a")
            subscriber.error("oops")

        events = collect(Stream(producer).pipe(operators.filter(lambda v: v != "a")))
        self.assertEqual(events, [("error", "oops")])


class TestSkip(unittest.TestCase):
    def test_skip_two_of_three(self) -> None:
        events = collect(operators.of("a", "b", "c").pipe(operators.skip(2)))
        self.assertEqual(events, [("next", "c"), ("complete", None)])

    def test_skip_two_of_two(self) -> None:
        events = collect(operators.of("a", "b").pipe(operators.skip(2)))
        self.assertEqual(events, [("complete", None)])

    def test_skip_zero_passes_everything(self) -> None:
        events = collect(operators.of("a").pipe(operators.skip(0)))
        self.assertEqual(events, [("next", "a"), ("complete", None)])

    def test_negative_count_rejected(self) -> None:
        with self.assertRaises(ValueError):
            operators.skip(-1)

    def test_each_subscription_counts_separately(self) -> None:
        stream = operators.of(1, 2, 3).pipe(operators.skip(1))
        self.assertEqual(collect(stream), collect(stream))


class TestCreation(unittest.TestCase):
    def test_from_iterable_emits_then_completes(self) -> None:
        events = collect(operators.from_iterable(["a", "b", "c"]))
        self.assertEqual(
            events, [("next", "a"), ("next", "b"), ("next", "c"), ("complete", None)]
        )

    def test_from_iterable_stops_when_downstream_terminates(self) -> None:
        pulled = []

        def source():
            for item in range(5):
                pulled.append(item)
                yield item

        stream = operators.from_iterable(source()).pipe(
            operators.map(lambda v: 1 / (v - 1))
        )
        events = collect(stream)

        self.assertEqual(pulled, [0, 1])
        self.assertEqual(events[-1][0], "error")

    def test_of_empty_only_completes(self) -> None:
        self.assertEqual(collect(operators.of()), [("complete", None)])

    def test_defer_invokes_factory_per_subscription(self) -> None:
        source = random.Random(7)
        stream = operators.defer(lambda: operators.of(source.randint(0, 1000)))

        first = collect(stream)
        second = collect(stream)

        expected = random.Random(7)
        self.assertEqual(first[0], ("next", expected.randint(0, 1000)))
        self.assertEqual(second[0], ("next", expected.randint(0, 1000)))

    def test_defer_factory_error_becomes_error(self) -> None:
        def factory():
            raise LookupError("no source")

        events = collect(operators.defer(factory))
        self.assertEqual(events[0][0], "error")
        self.assertIsInstance(events[0][1].cause, LookupError)

    def test_timer_rejects_negative_delay(self) -> None:
        with self.assertRaises(ValueError):
            operators.timer(-1)


if __name__ == "__main__":
    unittest.main()
