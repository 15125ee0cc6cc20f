from .registry import registry, run_handler


def load_builtin_handlers() -> None:
    # import side-effects for registration
    from . import build  # noqa: F401
    from . import copy  # noqa: F401
    from . import from_image  # noqa: F401
    from . import git_ops  # noqa: F401
    from . import image_config  # noqa: F401
    from . import rejected  # noqa: F401
    from . import run  # noqa: F401
    from . import save  # noqa: F401
    from . import variables  # noqa: F401
    from . import with_docker  # noqa: F401

    missing = registry.missing()
    if missing:
        names = ", ".join(kind.keyword for kind in missing)
        raise RuntimeError(f"Statements without a handler: {names}")


__all__ = ["registry", "run_handler", "load_builtin_handlers"]
