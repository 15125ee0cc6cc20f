import pytest

from builder.directives import WithDockerOptions, parse_load
from core.blocks import BlockPhase, BlockTracker
from core.errors import StateInvariantError


class TestBlockTracker:
    """WITH DOCKER / RUN / END pairing."""

    def test_full_cycle(self):
        tracker = BlockTracker()
        assert tracker.phase is BlockPhase.IDLE
        options = WithDockerOptions(compose_files=("c.yml",))
        tracker.open(options)
        assert tracker.phase is BlockPhase.AWAITING_ACTION
        assert tracker.begin_action() is options
        assert tracker.phase is BlockPhase.ACTION_DONE
        tracker.close()
        assert tracker.phase is BlockPhase.IDLE
        tracker.ensure_closed()

    def test_nested_open(self):
        tracker = BlockTracker()
        tracker.open(WithDockerOptions())
        with pytest.raises(StateInvariantError, match="within WITH DOCKER"):
            tracker.open(WithDockerOptions())

    def test_second_action(self):
        tracker = BlockTracker()
        tracker.open(WithDockerOptions())
        tracker.begin_action()
        with pytest.raises(StateInvariantError, match="only one RUN"):
            tracker.begin_action()

    def test_close_when_idle(self):
        with pytest.raises(StateInvariantError, match="END can only be used"):
            BlockTracker().close()

    def test_close_before_action(self):
        tracker = BlockTracker()
        tracker.open(WithDockerOptions())
        with pytest.raises(StateInvariantError, match="no RUN command found"):
            tracker.close()

    def test_unterminated(self):
        tracker = BlockTracker()
        tracker.open(WithDockerOptions())
        with pytest.raises(StateInvariantError, match="no matching END"):
            tracker.ensure_closed()


class TestParseLoad:
    def test_named_image(self):
        assert parse_load("app:latest=+build") == ("app:latest", "+build")

    def test_bare_target(self):
        """The image name is left empty to be inferred from SAVE IMAGE."""
        assert parse_load("./svc+image") == ("", "./svc+image")
