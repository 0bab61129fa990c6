from ast_nodes import ExportNamedDeclaration


def collect_exports(program):
    """Names a compiled module places in its export table, in source order."""
    names = []
    for stmt in program.body:
        if not isinstance(stmt, ExportNamedDeclaration):
            continue
        for name in stmt.exported_names():
            if name not in names:
                names.append(name)
    return names


class CompiledModule:
    def __init__(self, path, program, output, var_name):
        self.path = path              # canonical resolved path
        self.program = program        # import-stripped Program
        self.output = output          # generated text (bindings + body)
        self.var_name = var_name      # __shar_mod_<n>
        self.exports = tuple(collect_exports(program))

    def __repr__(self):
        return f"CompiledModule({self.path!r}, var={self.var_name}, exports={list(self.exports)})"


class ModuleCache:
    """Canonical path -> CompiledModule, filled at most once per path."""

    def __init__(self):
        self.modules = {}  # insertion order == wrapper emission order
        self.hits = 0

    def __contains__(self, path):
        return path in self.modules

    def __len__(self):
        return len(self.modules)

    def get(self, path):
        module = self.modules.get(path)
        if module is not None:
            self.hits += 1
        return module

    def add(self, module):
        if module.path in self.modules:
            raise KeyError(f"module already cached: {module.path}")
        self.modules[module.path] = module
        return module

    def values(self):
        return list(self.modules.values())
