"""
Compilation pipeline: scan -> parse -> link.

Each call builds fresh lexer, parser and model state, so compiling the
same source twice yields equal models and no state is shared between
compilations.
"""

from __future__ import annotations

import logging
from pathlib import Path

from . import ir
from .dsl_parser_impl import Parser
from .lexer import Token, tokenize
from .linker import build_model
from .strings import cap_upper

logger = logging.getLogger(__name__)

DEFAULT_MODEL_NAME = "Model"


def compile_tokens(tokens: list[Token], name: str = DEFAULT_MODEL_NAME) -> ir.Model:
    """
    Compile a token stream into a Model.

    Raises:
        CompileError: On any syntax or semantic error; no partial model is returned
    """
    declarations = Parser(tokens).parse()
    return build_model(name, declarations)


def compile_source(text: str, name: str = DEFAULT_MODEL_NAME) -> ir.Model:
    """
    Compile DSL source text into a Model.

    Args:
        text: DSL source
        name: Model name, used for generated artifact naming

    Returns:
        Resolved Model
    """
    tokens = tokenize(text)
    logger.debug("scanned %d tokens", len(tokens))
    return compile_tokens(tokens, name)


def model_name_for(path: Path) -> str:
    """Default model name for a source file: its capitalised stem."""
    return cap_upper(path.stem)


def compile_file(path: Path, name: str | None = None) -> ir.Model:
    """Read a UTF-8 DSL file and compile it."""
    text = path.read_text(encoding="utf-8")
    return compile_source(text, name or model_name_for(path))
