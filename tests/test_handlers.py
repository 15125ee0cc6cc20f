"""
Tests for individual statement handlers, asserted through the recording
builder's plan.
"""

from datetime import timedelta

from builder.directives import ImageLoadDirective, ImagePullDirective, WithDockerOptions
from core.errors import (
    ArityError,
    ObsoleteCommandError,
    OptionDecodeError,
    ReferenceConflictError,
    StateInvariantError,
    UnsupportedCommandError,
)
from lang.platforms import PlatformSpec


def body(*lines: str) -> str:
    """A target file with a single ``build`` target holding ``lines``."""
    return "build:\n" + "".join(f"    {line}\n" for line in lines)


class TestFrom:
    def test_options_and_image(self, run_target):
        builder = run_target(body("FROM --platform linux/arm64 --build-arg A=1 alpine:3.13"))
        assert builder.calls("from_image")[1] == {
            "image_name": "alpine:3.13",
            "platform": PlatformSpec("linux", "arm64"),
            "build_args": ("A=1",),
        }

    def test_target_reference(self, run_target):
        builder = run_target(body("FROM ./lib+deps"))
        assert builder.calls("from_image")[1]["image_name"] == "./lib+deps"

    def test_alias_rejected(self, target_error):
        err = target_error(body("FROM alpine AS builder"))
        assert isinstance(err, UnsupportedCommandError)
        assert str(err) == "AS not supported, use targets instead"

    def test_wrong_arity(self, target_error):
        assert isinstance(target_error(body("FROM alpine debian")), ArityError)

    def test_bad_platform(self, target_error):
        err = target_error(body("FROM --platform linux/* alpine"))
        assert isinstance(err, OptionDecodeError)
        assert "parse platform linux/*" in str(err)

    def test_unknown_option(self, target_error):
        err = target_error(body("FROM --bogus alpine"))
        assert isinstance(err, OptionDecodeError)
        assert "invalid FROM arguments" in str(err)


class TestFromDockerfile:
    def test_build_context_path(self, run_target):
        builder = run_target(body("FROM DOCKERFILE --target stage ."))
        assert builder.calls("from_dockerfile")[0] == {
            "context_path": ".",
            "dockerfile_path": "",
            "target": "stage",
            "platform": None,
            "build_args": (),
        }

    def test_artifact_context(self, run_target):
        builder = run_target(body("FROM DOCKERFILE +src/dir"))
        assert builder.calls("from_dockerfile")[0]["context_path"] == "+src/dir"

    def test_path_override_rejected(self, target_error):
        assert isinstance(target_error(body("FROM DOCKERFILE -f other.Dockerfile .")), UnsupportedCommandError)

    def test_wrong_arity(self, target_error):
        assert isinstance(target_error(body("FROM DOCKERFILE")), ArityError)


class TestCopy:
    def test_classical_sources(self, run_target):
        builder = run_target(body("COPY --dir --chown app:app a.txt b.txt /dest/"))
        assert builder.calls("copy_classical")[0] == {
            "srcs": ("a.txt", "b.txt"),
            "dest": "/dest/",
            "is_dir_copy": True,
            "keep_ts": False,
            "keep_own": False,
            "chown": "app:app",
        }

    def test_one_call_per_artifact(self, run_target):
        builder = run_target(body("COPY --build-arg V=2 +build/out ./lib+dist/app ./"))
        calls = builder.calls("copy_artifact")
        assert [call["src"] for call in calls] == ["+build/out", "./lib+dist/app"]
        assert all(call["build_args"] == ("V=2",) for call in calls)

    def test_artifact_copy_is_strict_by_default(self, run_target):
        builder = run_target(body("COPY +build/bin /app/bin"))
        calls = builder.calls("copy_artifact")
        assert len(calls) == 1
        assert calls[0]["if_exists"] is False

    def test_artifact_copy_if_exists(self, run_target):
        builder = run_target(body("COPY --if-exists +build/bin /app/bin"))
        assert builder.calls("copy_artifact")[0]["if_exists"] is True

    def test_mixed_sources_rejected(self, target_error):
        err = target_error(body("COPY +build/out local.txt ./"))
        assert isinstance(err, ReferenceConflictError)

    def test_build_args_need_artifacts(self, target_error):
        err = target_error(body("COPY --build-arg V=2 local.txt ./"))
        assert isinstance(err, ReferenceConflictError)

    def test_not_enough_arguments(self, target_error):
        assert isinstance(target_error(body("COPY only")), ArityError)

    def test_from_option_rejected(self, target_error):
        assert isinstance(target_error(body("COPY --from builder a b")), UnsupportedCommandError)


class TestRun:
    def test_shell_form_not_expanded(self, run_target):
        builder = run_target(body("ARG A=x", "RUN echo $A"))
        call = builder.calls("run")[0]
        assert call["args"] == ("echo", "$A")
        assert call["with_shell"] is True

    def test_exec_form_expanded(self, run_target):
        builder = run_target(body("ARG A=x", 'RUN ["echo", "$A"]'))
        call = builder.calls("run")[0]
        assert call["args"] == ("echo", "x")
        assert call["with_shell"] is False

    def test_with_docker_flag_implies_privileged(self, run_target):
        builder = run_target(body("RUN --with-docker docker ps"))
        call = builder.calls("run")[0]
        assert call["privileged"] is True
        assert call["with_docker"] is True

    def test_privileged_and_entrypoint(self, run_target):
        builder = run_target(body("RUN --privileged --entrypoint make"))
        call = builder.calls("run")[0]
        assert call["privileged"] is True
        assert call["with_entrypoint"] is True
        assert call["args"] == ("make",)

    def test_secrets_and_mounts(self, run_target):
        builder = run_target(
            body("RUN --ssh --secret TOKEN=+secrets/token --mount type=cache,target=/cache make")
        )
        call = builder.calls("run")[0]
        assert call["secrets"] == ("TOKEN=+secrets/token",)
        assert call["mounts"] == ("type=cache,target=/cache",)
        assert call["with_ssh"] is True

    def test_options_end_at_first_word(self, run_target):
        builder = run_target(body("RUN ls --push"))
        call = builder.calls("run")[0]
        assert call["args"] == ("ls", "--push")
        assert call["push"] is False

    def test_no_command(self, target_error):
        assert isinstance(target_error(body("RUN")), ArityError)

    def test_null_exec_form_has_no_command(self, target_error):
        err = target_error(body("RUN null"))
        assert isinstance(err, ArityError)
        assert "not enough arguments for RUN" in str(err)


class TestSaveArtifact:
    def test_source_only(self, run_target):
        builder = run_target(body("SAVE ARTIFACT bin"))
        call = builder.calls("save_artifact")[0]
        assert (call["save_from"], call["save_to"], call["save_as_local_to"]) == ("bin", "./", "")

    def test_source_and_destination(self, run_target):
        builder = run_target(body("SAVE ARTIFACT --keep-ts bin out"))
        call = builder.calls("save_artifact")[0]
        assert call["save_to"] == "out"
        assert call["keep_ts"] is True

    def test_if_exists(self, run_target):
        builder = run_target(body("SAVE ARTIFACT --if-exists bin"))
        assert builder.calls("save_artifact")[0]["if_exists"] is True

    def test_as_local(self, run_target):
        builder = run_target(body("SAVE ARTIFACT bin AS LOCAL ./local"))
        call = builder.calls("save_artifact")[0]
        assert (call["save_to"], call["save_as_local_to"]) == ("./", "./local")

    def test_destination_and_as_local(self, run_target):
        builder = run_target(body("SAVE ARTIFACT bin out AS LOCAL ./local"))
        call = builder.calls("save_artifact")[0]
        assert (call["save_to"], call["save_as_local_to"]) == ("out", "./local")

    def test_bad_shapes(self, target_error):
        for line in (
            "SAVE ARTIFACT",
            "SAVE ARTIFACT a b c",
            "SAVE ARTIFACT a b AS REMOTE c",
            "SAVE ARTIFACT a b c AS LOCAL d",
        ):
            assert isinstance(target_error(body(line)), ArityError), line


class TestSaveImage:
    def test_push(self, run_target):
        builder = run_target(body("SAVE IMAGE --push --cache-from org/cache org/app:latest"))
        assert builder.calls("save_image")[0] == {
            "image_names": ("org/app:latest",),
            "push": True,
            "insecure": False,
            "cache_hint": False,
            "cache_from": ("org/cache",),
        }

    def test_push_needs_a_name(self, target_error):
        assert isinstance(target_error(body("SAVE IMAGE --push")), ArityError)

    def test_no_arguments_is_deprecated_noop(self, run_target, caplog):
        builder = run_target(body("SAVE IMAGE"))
        assert builder.operations == ["from_image"]
        assert "Deprecation" in caplog.text

    def test_insecure_push(self, run_target):
        builder = run_target(body("SAVE IMAGE --insecure org/app"))
        assert builder.calls("save_image")[0]["insecure"] is True

    def test_cache_hint_alone(self, run_target):
        builder = run_target(body("SAVE IMAGE --cache-hint"))
        assert builder.calls("save_image")[0]["cache_hint"] is True


class TestBuild:
    def test_default_platform(self, run_target):
        builder = run_target(body("BUILD +other"))
        assert builder.calls("build") == [{"target_ref": "+other", "platform": None, "build_args": ()}]

    def test_one_call_per_platform(self, run_target):
        builder = run_target(body("BUILD --platform linux/amd64 --platform linux/arm64 --build-arg V=1 +other"))
        calls = builder.calls("build")
        assert [call["platform"] for call in calls] == [
            PlatformSpec("linux", "amd64"),
            PlatformSpec("linux", "arm64"),
        ]
        assert all(call["build_args"] == ("V=1",) for call in calls)

    def test_exactly_one_target(self, target_error):
        assert isinstance(target_error(body("BUILD +a +b")), ArityError)


class TestImageConfig:
    def test_workdir_and_user(self, run_target):
        builder = run_target(body("WORKDIR /app", "USER nobody"))
        assert builder.calls("workdir") == [{"path": "/app"}]
        assert builder.calls("user") == [{"user": "nobody"}]

    def test_workdir_arity(self, target_error):
        err = target_error(body("WORKDIR a b"))
        assert isinstance(err, ArityError)
        assert "WORKDIR" in str(err)

    def test_cmd_forms(self, run_target):
        builder = run_target(body("CMD echo $HOME", 'ENTRYPOINT ["/bin/app", "--serve"]'))
        assert builder.calls("cmd") == [{"args": ("echo", "$HOME"), "with_shell": True}]
        assert builder.calls("entrypoint") == [{"args": ("/bin/app", "--serve"), "with_shell": False}]

    def test_expose_and_volume(self, run_target):
        builder = run_target(body("ARG PORT=8080", "EXPOSE $PORT 443", "VOLUME /data"))
        assert builder.calls("expose") == [{"ports": ("8080", "443")}]
        assert builder.calls("volume") == [{"volumes": ("/data",)}]

    def test_expose_needs_ports(self, target_error):
        err = target_error(body("EXPOSE"))
        assert str(err) == "no arguments provided to the EXPOSE command"


class TestHealthcheck:
    def test_cmd_with_options(self, run_target):
        builder = run_target(body("HEALTHCHECK --interval 1m --retries 5 CMD curl -f http://localhost"))
        assert builder.calls("healthcheck")[0] == {
            "is_none": False,
            "cmd_args": ("curl", "-f", "http://localhost"),
            "interval": timedelta(minutes=1),
            "timeout": timedelta(seconds=30),
            "start_period": timedelta(0),
            "retries": 5,
        }

    def test_none(self, run_target):
        builder = run_target(body("HEALTHCHECK NONE"))
        call = builder.calls("healthcheck")[0]
        assert call["is_none"] is True
        assert call["cmd_args"] == ()

    def test_bad_forms(self, target_error):
        assert isinstance(target_error(body("HEALTHCHECK NONE extra")), ArityError)
        assert isinstance(target_error(body("HEALTHCHECK CMD")), ArityError)
        assert isinstance(target_error(body("HEALTHCHECK PING")), ArityError)
        assert isinstance(target_error(body("HEALTHCHECK")), ArityError)

    def test_exec_form_unsupported(self, target_error):
        err = target_error(body('HEALTHCHECK ["CMD"]'))
        assert isinstance(err, UnsupportedCommandError)

    def test_bad_duration(self, target_error):
        assert isinstance(target_error(body("HEALTHCHECK --interval soon CMD true")), OptionDecodeError)


class TestVariables:
    def test_env_forms(self, run_target):
        builder = run_target(body("ENV A=1", "ENV B two", 'ENV C="three four"'))
        assert builder.calls("env") == [
            {"key": "A", "value": "1"},
            {"key": "B", "value": "two"},
            {"key": "C", "value": "three four"},
        ]

    def test_labels(self, run_target):
        builder = run_target(body("ARG TEAM=core", "LABEL owner=$TEAM tier=backend"))
        assert builder.calls("label") == [{"labels": {"owner": "core", "tier": "backend"}}]

    def test_label_without_pairs(self, target_error):
        err = target_error(body("LABEL"))
        assert str(err) == "no labels provided in LABEL command: LABEL"

    def test_label_mismatch(self, target_error):
        err = target_error(body("LABEL a=1 b"))
        assert isinstance(err, ArityError)
        assert str(err) == "label keys and values do not match: LABEL a=1 b"


class TestGitClone:
    def test_clone(self, run_target):
        builder = run_target(body("GIT CLONE --branch main --keep-ts https://example.com/repo.git src"))
        assert builder.calls("git_clone") == [
            {"url": "https://example.com/repo.git", "branch": "main", "dest": "src", "keep_ts": True}
        ]

    def test_arity(self, target_error):
        assert isinstance(target_error(body("GIT CLONE https://example.com/repo.git")), ArityError)


class TestWithDocker:
    def test_block_runs_inner_command(self, run_target):
        builder = run_target(
            body(
                "WITH DOCKER --compose c.yml --service db --load img=+svc --load +other "
                "--pull redis:6 --platform linux/amd64 --build-arg A=1",
                "    RUN --mount type=tmpfs,target=/t docker run img",
                "END",
            )
        )
        platform = PlatformSpec("linux", "amd64")
        assert builder.operations == ["from_image", "with_docker_run"]
        assert builder.calls("with_docker_run")[0] == {
            "args": ("docker", "run", "img"),
            "options": WithDockerOptions(
                compose_files=("c.yml",),
                compose_services=("db",),
                loads=(
                    ImageLoadDirective(target="+svc", image_name="img", platform=platform, build_args=("A=1",)),
                    ImageLoadDirective(target="+other", image_name="", platform=platform, build_args=("A=1",)),
                ),
                pulls=(ImagePullDirective(image_name="redis:6", platform=platform),),
                mounts=("type=tmpfs,target=/t",),
                secrets=(),
                with_shell=True,
                with_entrypoint=False,
            ),
        }

    def test_missing_inner_run(self, target_error):
        err = target_error(body("WITH DOCKER --load foo=+bar", "END"))
        assert isinstance(err, StateInvariantError)
        assert str(err) == "no RUN command found in WITH DOCKER"

    def test_second_inner_run(self, target_error):
        err = target_error(body("WITH DOCKER", "RUN a", "RUN b", "END"))
        assert str(err) == "only one RUN command allowed in WITH DOCKER"

    def test_nested_block(self, target_error):
        err = target_error(body("WITH DOCKER", "WITH DOCKER", "RUN a", "END", "END"))
        assert str(err) == "cannot use WITH DOCKER within WITH DOCKER"

    def test_end_without_block(self, target_error):
        err = target_error(body("END"))
        assert str(err) == "END can only be used to end a WITH DOCKER clause"

    def test_unterminated_block(self, target_error):
        err = target_error(body("WITH DOCKER", "RUN a"))
        assert str(err) == "no matching END found for WITH DOCKER"

    def test_end_takes_no_arguments(self, target_error):
        err = target_error(body("WITH DOCKER", "RUN a", "END now"))
        assert isinstance(err, ArityError)

    def test_push_inside_block(self, target_error):
        err = target_error(body("WITH DOCKER", "RUN --push a", "END"))
        assert isinstance(err, ReferenceConflictError)

    def test_positional_arguments_rejected(self, target_error):
        assert isinstance(target_error(body("WITH DOCKER extra", "RUN a", "END")), ArityError)

    def test_block_can_reopen_after_end(self, run_target):
        builder = run_target(body("WITH DOCKER", "RUN a", "END", "WITH DOCKER", "RUN b", "END"))
        assert builder.operations == ["from_image", "with_docker_run", "with_docker_run"]


class TestRejectedCommands:
    def test_not_yet_supported(self, target_error):
        for keyword in ("ADD", "STOPSIGNAL", "SHELL"):
            err = target_error(body(f"{keyword} x"))
            assert isinstance(err, UnsupportedCommandError)
            assert str(err) == f"command {keyword} not yet supported"

    def test_onbuild(self, target_error):
        assert str(target_error(body("ONBUILD RUN x"))) == "command ONBUILD not supported"

    def test_obsolete_docker_load(self, target_error):
        err = target_error(body("DOCKER LOAD +img img"))
        assert isinstance(err, ObsoleteCommandError)
        assert err.replacement == "WITH DOCKER --load"

    def test_obsolete_docker_pull(self, target_error):
        err = target_error(body("DOCKER PULL redis"))
        assert str(err) == "DOCKER PULL is obsolete. Please use WITH DOCKER --pull"

    def test_generic_command(self, target_error):
        err = target_error(body("FROBNICATE now"))
        assert str(err) == "invalid command FROBNICATE now"
