"""Generate the declarations of a whole schema.

Output order: inline enums (merged across shapes), standalone enum shapes,
shape types, and, for emitters that want them, name contexts followed by the
schema source and one shape object per shape. TypeScript type
aliases may refer to each other in any order, so reference cycles between
shapes need no special treatment.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional

from shexts_py.config import GeneratorConfig
from shexts_py.errors import UnsupportedExpressionKind
from shexts_py.generator.assembler import ShapeArtifact, ShapeAssembler
from shexts_py.generator.emitter import Emitter, TypeScriptEmitter, get_emitter
from shexts_py.generator.merge import union_values
from shexts_py.generator.synthesizer import enum_name
from shexts_py.naming import RDF_TYPE, PrefixMap, enum_member_names, normalize_url, to_identifier
from shexts_py.schema.shex import EnumShape, Shape, ShExSchema, ValueSetValue

logger = logging.getLogger(__name__)


class InlineEnumAccumulator:
    """Inline enums of one generation run, merged by name."""

    def __init__(self):
        self.enums: dict[str, list[ValueSetValue]] = {}

    def add(self, inline_enums: Mapping[str, list[ValueSetValue]]) -> None:
        for name, values in inline_enums.items():
            if name in self.enums:
                logger.debug("Merging values into inline enum %s", name)
            self.enums[name] = union_values(self.enums.get(name, []), values)

    def member_table(self, prefixes: PrefixMap) -> dict[str, dict[str, str]]:
        return {
            name: enum_member_names(values, prefixes)
            for name, values in self.enums.items()
        }


@dataclass
class GenerationResult:
    declarations: list[str] = field(default_factory=list)
    artifacts: list[ShapeArtifact] = field(default_factory=list)
    inline_enums: dict[str, list[ValueSetValue]] = field(default_factory=dict)
    enum_shapes: list[str] = field(default_factory=list)


class SchemaDriver:
    def __init__(self, emitter: Optional[Emitter] = None, module_name: str = "schema"):
        self.emitter = emitter or TypeScriptEmitter()
        self.module_name = module_name

    def _render_enum(self, name: str, values: list[ValueSetValue], prefixes: PrefixMap) -> str:
        members = enum_member_names(values, prefixes)
        return self.emitter.render_enum(name, ((members[v.lexical], v.lexical) for v in values))

    def _render_shape_methods(self, artifacts: list[ShapeArtifact], shex: str) -> list[str]:
        shex_name = to_identifier(self.module_name)
        exported = {a.iri.value: a.exported_name for a in artifacts}
        rendered = [self.emitter.render_shex_export(shex_name, shex)]
        for a in artifacts:
            children = [
                exported[c] for c in a.child_shapes
                if c in exported and c != a.iri.value
            ]
            rendered.append(self.emitter.render_shape_methods(
                normalize_url(a.iri.value),
                a.exported_name,
                a.iri.value,
                shex_name,
                type_enum=enum_name(a.iri, RDF_TYPE) if a.typed else None,
                child_types=children,
            ))
        return rendered

    def run(self, schema: ShExSchema, shex: Optional[str] = None) -> GenerationResult:
        """Generate every declaration of a schema.

        ``shex`` is the ShExC source of the schema; only emitters producing
        shape objects need it, and for those it is required.
        """
        if self.emitter.emits_shape_methods and shex is None:
            raise ValueError(f"The {self.emitter.name!r} emitter needs the ShExC source of the schema")
        prefixes = PrefixMap(schema.prefixes)
        enum_shapes: list[EnumShape] = []
        shapes: list[Shape] = []
        for decl in schema.shapes:
            if isinstance(decl, EnumShape):
                enum_shapes.append(decl)
            elif isinstance(decl, Shape):
                shapes.append(decl)
            else:
                raise UnsupportedExpressionKind(type(decl).__name__)
        enum_ids = {s.name.value for s in enum_shapes}
        logger.debug("%d enum shapes, %d structural shapes", len(enum_shapes), len(shapes))

        assembler = ShapeAssembler(self.emitter)

        # Member names depend on every value an enum ends up with, which is
        # only known after all shapes have been seen once.
        collected = InlineEnumAccumulator()
        for shape in shapes:
            collected.add(assembler.assemble(shape, prefixes).inline_enums)
        known_enums = collected.member_table(prefixes)

        accumulator = InlineEnumAccumulator()
        artifacts: list[ShapeArtifact] = []
        for shape in shapes:
            artifact = assembler.assemble(shape, prefixes, known_enums)
            artifact.child_shapes = [c for c in artifact.child_shapes if c not in enum_ids]
            accumulator.add(artifact.inline_enums)
            artifacts.append(artifact)

        declarations = [
            self._render_enum(name, values, prefixes)
            for name, values in accumulator.enums.items()
        ]
        declarations += [
            self._render_enum(enum_name(s.name), s.values, prefixes) for s in enum_shapes
        ]
        declarations += [a.declaration for a in artifacts]
        if self.emitter.emits_name_contexts:
            # Shape objects refer to the context of every shape, empty or not.
            declarations += [
                self.emitter.render_name_context(a.exported_name, a.name_context)
                for a in artifacts
                if a.name_context or self.emitter.emits_shape_methods
            ]
        if self.emitter.emits_shape_methods:
            declarations += self._render_shape_methods(artifacts, shex)

        return GenerationResult(
            declarations=declarations,
            artifacts=artifacts,
            inline_enums=accumulator.enums,
            enum_shapes=sorted(enum_ids),
        )

    def generate(self, schema: ShExSchema, shex: Optional[str] = None) -> list[str]:
        return self.run(schema, shex).declarations


def generate(
    schema: ShExSchema,
    config: Optional[GeneratorConfig] = None,
    shex: Optional[str] = None,
) -> list[str]:
    """Generate the TypeScript declarations of a schema.

    Args:
        schema: The parsed ShEx schema.
        config: Generation options (default: plain types).
        shex: ShExC source of the schema, required by the "methods" emitter.

    Returns:
        Ordered declaration strings, each ending with a newline.
    """
    config = config or GeneratorConfig()
    driver = SchemaDriver(get_emitter(config.emitter, config.indent), config.module_name)
    return driver.generate(schema, shex)


def generate_module(
    schema: ShExSchema,
    config: Optional[GeneratorConfig] = None,
    shex: Optional[str] = None,
) -> str:
    """Generate one TypeScript module holding every declaration of a schema."""
    config = config or GeneratorConfig()
    emitter = get_emitter(config.emitter, config.indent)
    parts = SchemaDriver(emitter, config.module_name).generate(schema, shex)
    if config.include_preamble:
        parts = emitter.preamble() + parts
    return "\n".join(parts)
