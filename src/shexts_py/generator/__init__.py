"""ShEx schema to TypeScript declaration generator."""
from shexts_py.generator.assembler import ShapeArtifact, ShapeAssembler
from shexts_py.generator.driver import SchemaDriver, generate, generate_module
from shexts_py.generator.emitter import (
    Emitter,
    TypeScriptContextEmitter,
    TypeScriptEmitter,
    get_emitter,
)
from shexts_py.generator.merge import merge_duplicate_properties
from shexts_py.generator.walker import ExpressionWalker, Fragment, WalkContext
