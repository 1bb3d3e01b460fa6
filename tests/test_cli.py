from __future__ import annotations

import pytest

from ecochess.cli.main import build_parser


def test_play_arguments() -> None:
    args = build_parser().parse_args(["play", "--engine", "material", "--depth", "2", "--engine-color", "w"])
    assert args.command == "play"
    assert args.engine == "material"
    assert args.depth == 2
    assert args.engine_color == "w"
    assert args.no_color is False


def test_serve_defaults() -> None:
    args = build_parser().parse_args(["--log-level", "DEBUG", "serve"])
    assert args.log_level == "DEBUG"
    assert args.port == 8000


def test_unknown_engine_is_rejected() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["play", "--engine", "oracle"])
