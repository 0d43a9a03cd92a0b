import unittest

from marbles.config import (
    ClockConfig,
    DiagramConfig,
    HarnessConfig,
    load_default_config,
    parse_config,
    validate_config,
)


class TestConfig(unittest.TestCase):
    def test_default_config_loads(self) -> None:
        config = load_default_config()

        self.assertEqual(config.clock.max_frames, 100000)
        self.assertEqual(config.clock.frame_ms, 1)
        self.assertEqual(config.diagrams.default_error, "error")

    def test_parse_config(self) -> None:
        config = parse_config(
            {"clock": {"max_frames": 500, "frame_ms": 10}, "diagrams": {"default_error": "x"}}
        )
        self.assertEqual(
            config,
            HarnessConfig(
                clock=ClockConfig(max_frames=500, frame_ms=10),
                diagrams=DiagramConfig(default_error="x"),
            ),
        )

    def test_diagrams_section_is_optional(self) -> None:
        config = parse_config({"clock": {"max_frames": 5}})
        self.assertEqual(config.diagrams, DiagramConfig())
        self.assertEqual(config.clock.frame_ms, 1)

    def test_unknown_keys_rejected(self) -> None:
        payloads = [
            {"clock": {"max_frames": 5}, "extra": 1},
            {"clock": {"max_frames": 5, "tick": 1}},
            {"clock": {"max_frames": 5}, "diagrams": {"colour": "red"}},
        ]
        for payload in payloads:
            with self.subTest(payload=payload):
                with self.assertRaises(ValueError):
                    parse_config(payload)

    def test_wrong_types_rejected(self) -> None:
        payloads = [
            {},
            {"clock": {"max_frames": "5"}},
            {"clock": {"max_frames": True}},
            {"clock": {"max_frames": 5, "frame_ms": 1.5}},
            {"clock": {"max_frames": 5}, "diagrams": {"default_error": 3}},
        ]
        for payload in payloads:
            with self.subTest(payload=payload):
                with self.assertRaises(ValueError):
                    parse_config(payload)

    def test_validate_config(self) -> None:
        with self.assertRaisesRegex(ValueError, "clock.max_frames must be > 0"):
            validate_config(HarnessConfig(clock=ClockConfig(max_frames=0), diagrams=DiagramConfig()))
        with self.assertRaisesRegex(ValueError, "clock.frame_ms must be > 0"):
            validate_config(
                HarnessConfig(clock=ClockConfig(max_frames=1, frame_ms=0), diagrams=DiagramConfig())
            )
        with self.assertRaises(ValueError):
            validate_config(
                HarnessConfig(clock=ClockConfig(max_frames=1), diagrams=DiagramConfig(default_error=""))
            )


if __name__ == "__main__":
    unittest.main()
