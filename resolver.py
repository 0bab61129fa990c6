import logging
import os
import time

from ast_nodes import ASTNode, Program, ImportDeclaration
from compiler import Compiler, EXPORTS_NAME
from config import FetchConfig
from errors import SharImportError
from lexer import Lexer
from modules import CompiledModule, ModuleCache
from parser import Parser
from typecheck import TypeChecker, parse_type_spec

log = logging.getLogger(__name__)

SOURCE_EXTENSION = ".shar"
TYPES_EXTENSION = ".shari"
MODULE_VAR_PREFIX = "__shar_mod_"


class FileSystem:
    """Default I/O collaborator: real files, read as UTF-8."""

    def exists(self, path):
        return os.path.isfile(path)

    def read(self, path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except OSError:
            return None


def canonical_path(path):
    return os.path.normpath(os.path.abspath(path))


def strip_imports(program):
    return Program([stmt for stmt in program.body if not isinstance(stmt, ImportDeclaration)])


def descendants(node):
    for value in vars(node).values():
        items = value if isinstance(value, list) else [value]
        for item in items:
            if isinstance(item, ASTNode):
                yield item
                yield from descendants(item)


def nested_imports(program):
    """Import declarations below the top level; these are never resolved."""
    for stmt in program.body:
        for node in descendants(stmt):
            if isinstance(node, ImportDeclaration):
                yield node


def module_wrapper(module):
    return (
        f"const {module.var_name} = (function(){{ var {EXPORTS_NAME} = {{}};\n"
        f"{module.output}\n"
        f"return {EXPORTS_NAME}; }})();"
    )


class BuildResult:
    def __init__(self, path, program, output, modules, warnings, type_result=None):
        self.path = path                # root path, or None for in-memory source
        self.program = program          # root Program, imports included
        self.output = output            # assembled JavaScript
        self.modules = modules          # list[CompiledModule], emission order
        self.warnings = warnings        # resolver warnings (imports)
        self.type_result = type_result  # TypeCheckResult | None

    @property
    def has_type_errors(self):
        return self.type_result is not None and not self.type_result.ok


class ModuleResolver:
    """Compiles a root program and everything it imports.

    Every call to ``compile_file``/``compile_source`` owns a fresh cache, so a
    module is lexed, parsed and generated at most once per build no matter how
    many programs import it.
    """

    def __init__(self, fs=None, config: FetchConfig | None = None, extension=SOURCE_EXTENSION):
        self.fs = fs or FileSystem()
        self.compiler = Compiler(config)
        self.extension = extension
        self._reset()

    def _reset(self):
        self.cache = ModuleCache()
        self.loading = set()   # canonical paths currently being compiled
        self.warnings = []

    def warn(self, message):
        log.warning(message)
        self.warnings.append(message)

    # ---------- entry points ----------
    def compile_file(self, path, check_types=True):
        root = canonical_path(path)
        source = self.fs.read(root) if self.fs.exists(root) else None
        if source is None:
            raise SharImportError(path, message="file not found")

        type_spec = None
        if check_types:
            types_path = os.path.splitext(root)[0] + TYPES_EXTENSION
            if self.fs.exists(types_path):
                spec_text = self.fs.read(types_path)
                if spec_text is not None:
                    log.debug("loaded type spec %s", types_path)
                    type_spec = parse_type_spec(spec_text)

        return self._build(source, root, type_spec)

    def compile_source(self, source, type_spec=None):
        # imports are resolved relative to the current directory
        return self._build(source, None, type_spec)

    # ---------- internals ----------
    def _build(self, source, root, type_spec):
        self._reset()
        started = time.perf_counter()
        log.debug("build start: %s", root or "<source>")

        program = self._parse(source, root or "<source>")
        if root is not None:
            self.loading.add(root)
        try:
            bindings = self._link_imports(program, root)
        finally:
            self.loading.discard(root)
        main_output = self.compiler.compile(strip_imports(program))

        type_result = None
        if type_spec is not None:
            type_result = TypeChecker(type_spec).check(program)

        modules = self.cache.values()
        sections = [self.compiler.helper_prelude()]
        sections.extend(module_wrapper(m) for m in modules)
        sections.extend(bindings)
        sections.append(main_output)
        output = "\n".join(s for s in sections if s) + "\n"

        log.debug(
            "build done in %.1fms: %d module(s), %d cache hit(s)",
            (time.perf_counter() - started) * 1000, len(modules), self.cache.hits,
        )
        return BuildResult(root, program, output, modules, list(self.warnings), type_result)

    def _parse(self, source, label):
        t0 = time.perf_counter()
        lexer = Lexer(source)
        program = Parser(lexer).parse()
        log.debug("parsed %s in %.1fms (%d statements)", label, (time.perf_counter() - t0) * 1000, len(program.body))
        return program

    def resolve_import_path(self, source, importer):
        if os.path.isabs(source):
            candidate = source
        else:
            base_dir = os.path.dirname(importer) if importer else os.getcwd()
            candidate = os.path.join(base_dir, source)
        candidate = canonical_path(candidate)
        if self.fs.exists(candidate):
            return candidate
        if self.fs.exists(candidate + self.extension):
            return candidate + self.extension
        return None

    def _link_imports(self, program, importer):
        """Compile every module ``program`` imports; return its binding lines."""
        bindings = []
        bound = {}  # local name -> module path
        for stmt in nested_imports(program):
            self.warn(f"Import ignored: only top-level imports are resolved (line {stmt.line})")

        for stmt in program.body:
            if not isinstance(stmt, ImportDeclaration):
                continue
            if not stmt.source:
                self.warn(f"Import without a source path (line {stmt.line})")
                continue

            resolved = self.resolve_import_path(stmt.source, importer)
            if resolved is None:
                self.warn(f"Imported file not found: {stmt.source}")
                continue

            module = self.load_module(resolved)
            if module is None:
                continue

            for name in stmt.specifiers or []:
                if name in bound:
                    self.warn(f"Duplicate import binding '{name}' from {stmt.source}")
                    continue
                if name not in module.exports:
                    self.warn(f"Module {stmt.source} does not export '{name}'")
                bound[name] = module.path
                bindings.append(f'const {name} = {module.var_name}["{name}"];')
        return bindings

    def load_module(self, path):
        module = self.cache.get(path)
        if module is not None:
            log.debug("using cached module: %s", path)
            return module
        if path in self.loading:
            self.warn(f"Circular import ignored: {path}")
            return None

        source = self.fs.read(path)
        if source is None:
            self.warn(f"Cannot read imported file: {path}")
            return None

        self.loading.add(path)
        try:
            t0 = time.perf_counter()
            program = self._parse(source, path)
            bindings = self._link_imports(program, path)
            stripped = strip_imports(program)
            body = self.compiler.compile(stripped)
            output = "\n".join(part for part in bindings + [body] if part)
            var_name = f"{MODULE_VAR_PREFIX}{len(self.cache)}"
            module = self.cache.add(CompiledModule(path, stripped, output, var_name))
            log.debug("compiled module %s in %.1fms", os.path.basename(path), (time.perf_counter() - t0) * 1000)
        finally:
            self.loading.discard(path)
        return module


def compile_file(path, config=None, fs=None, check_types=True):
    return ModuleResolver(fs=fs, config=config).compile_file(path, check_types=check_types)
