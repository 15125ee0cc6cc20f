from click.testing import CliRunner

from app.cli import main

TARGETFILE = """\
FROM alpine:3.13

build:
    ARG NAME=world
    WORKDIR /srv/$NAME
    RUN echo hi
"""


def write_targetfile(tmp_path, text=TARGETFILE):
    path = tmp_path / "Targetfile"
    path.write_text(text, encoding="utf-8")
    return path


class TestCli:
    def test_prints_plan(self, tmp_path):
        result = CliRunner().invoke(main, [str(write_targetfile(tmp_path)), "--target", "build"])
        assert result.exit_code == 0, result.output
        assert "Plan for target=build (4 steps):" in result.output
        assert "workdir(path='/srv/world')" in result.output

    def test_build_arg_override(self, tmp_path):
        result = CliRunner().invoke(
            main, [str(write_targetfile(tmp_path)), "--target", "build", "--build-arg", "NAME=moon"]
        )
        assert result.exit_code == 0, result.output
        assert "workdir(path='/srv/moon')" in result.output

    def test_settings_file(self, tmp_path):
        settings = tmp_path / "settings.jsonc"
        settings.write_text('{"target": "build", "build_args": {"NAME": "mars"},}', encoding="utf-8")
        result = CliRunner().invoke(main, [str(write_targetfile(tmp_path)), "--config", str(settings)])
        assert result.exit_code == 0, result.output
        assert "workdir(path='/srv/mars')" in result.output

    def test_default_target_is_base(self, tmp_path):
        result = CliRunner().invoke(main, [str(write_targetfile(tmp_path))])
        assert result.exit_code == 0, result.output
        assert "Plan for target=base (1 steps):" in result.output

    def test_interpretation_error(self, tmp_path):
        result = CliRunner().invoke(main, [str(write_targetfile(tmp_path)), "--target", "deploy"])
        assert result.exit_code == 1
        assert "target deploy not defined" in result.output

    def test_bad_build_arg(self, tmp_path):
        result = CliRunner().invoke(main, [str(write_targetfile(tmp_path)), "--build-arg", "NOVALUE"])
        assert result.exit_code == 2

    def test_negative_timeout_rejected(self, tmp_path):
        result = CliRunner().invoke(main, [str(write_targetfile(tmp_path)), "--target", "build", "--timeout", "-1"])
        assert result.exit_code == 2
        assert "Traceback" not in result.output
