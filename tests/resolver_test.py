import os
from collections import Counter

import pytest

from config import FetchConfig
from errors import SharImportError
from resolver import FileSystem, ModuleResolver, compile_file


class MemoryFS:
    def __init__(self, files):
        self.files = {os.path.normpath(path): text for path, text in files.items()}
        self.reads = Counter()

    def exists(self, path):
        return path in self.files

    def read(self, path):
        self.reads[path] += 1
        return self.files.get(path)


MATH = (
    "niryaat karya add(a, b) { wapas a + b }\n"
    "niryaat karya sub(a, b) { wapas a - b }\n"
)


def build(files, root="/proj/main.shar", **kwargs):
    fs = MemoryFS(files)
    resolver = ModuleResolver(fs=fs, **kwargs)
    return resolver.compile_file(root), fs


def test_same_module_is_compiled_once():
    result, fs = build({
        "/proj/main.shar": "aayaat { add } se './math'\naayaat { sub } se './math.shar'\nbol add(1, sub(3, 2))",
        "/proj/math.shar": MATH,
    })
    assert fs.reads["/proj/math.shar"] == 1
    assert len(result.modules) == 1
    assert result.output.count("(function(){ var __shar_exports = {};") == 1
    assert "__shar_mod_1" not in result.output
    assert 'const add = __shar_mod_0["add"];' in result.output
    assert 'const sub = __shar_mod_0["sub"];' in result.output
    assert result.warnings == []


def test_output_order():
    result, _ = build({
        "/proj/main.shar": "aayaat { add } se './math'\nbol add(1, 2)",
        "/proj/math.shar": MATH,
    })
    out = result.output
    helper = out.index("const __shar_fetch")
    wrapper = out.index("const __shar_mod_0 = (function(){")
    binding = out.index('const add = __shar_mod_0["add"];')
    main = out.index("console.log(add(1, 2));")
    assert helper < wrapper < binding < main


def test_wrapper_returns_export_table():
    result, _ = build({
        "/proj/main.shar": "aayaat { add } se './math'",
        "/proj/math.shar": MATH,
    })
    assert result.modules[0].exports == ("add", "sub")
    assert "return __shar_exports; })();" in result.output
    assert '__shar_exports["add"] = add;' in result.output


def test_import_declarations_are_stripped():
    result, _ = build({
        "/proj/main.shar": "aayaat './math'\nbol 1",
        "/proj/math.shar": MATH,
    })
    assert "aayaat" not in result.output
    assert "./math" not in result.output
    # the returned program still carries the import for inspection and type checking
    assert len(result.program.body) == 2


def test_missing_import_is_a_warning():
    result, _ = build({"/proj/main.shar": "aayaat { x } se './nope'\nbol 1"})
    assert result.warnings == ["Imported file not found: ./nope"]
    assert result.modules == []
    assert "const x" not in result.output
    assert result.output.rstrip().endswith("console.log(1);")


def test_import_without_path_is_a_warning():
    result, _ = build({"/proj/main.shar": "aayaat { x } se\nbol 1"})
    assert len(result.warnings) == 1
    assert "without a source path" in result.warnings[0]


def test_imports_resolve_relative_to_importer():
    result, fs = build({
        "/proj/main.shar": "aayaat { greet } se './lib/greet'\nbol greet()",
        "/proj/lib/greet.shar": "aayaat { name } se '../shared/name.shar'\nniryaat karya greet() { wapas 'hi ' + name }",
        "/proj/shared/name.shar": "niryaat sthayi name = 'dost'",
    })
    assert result.warnings == []
    assert [m.path for m in result.modules] == [
        os.path.normpath("/proj/shared/name.shar"),
        os.path.normpath("/proj/lib/greet.shar"),
    ]
    out = result.output
    # dependencies are emitted first, and each module binds its own imports
    assert out.index("const __shar_mod_0") < out.index("const __shar_mod_1")
    assert 'const name = __shar_mod_0["name"];' in out
    assert out.index('const name = __shar_mod_0["name"];') < out.index("function greet()")
    assert 'const greet = __shar_mod_1["greet"];' in out


def test_absolute_import_path_passes_through():
    result, _ = build({
        "/proj/main.shar": "aayaat { add } se '/libs/math.shar'",
        "/libs/math.shar": MATH,
    })
    assert result.warnings == []
    assert result.modules[0].path == os.path.normpath("/libs/math.shar")


def test_circular_import_is_dropped():
    result, _ = build({
        "/proj/main.shar": "aayaat { a } se './a'",
        "/proj/a.shar": "aayaat { b } se './b'\nniryaat ye a = 1",
        "/proj/b.shar": "aayaat { a } se './a'\nniryaat ye b = 2",
    })
    assert len(result.modules) == 2
    assert any("Circular import" in w for w in result.warnings)


def test_missing_export_is_a_warning():
    result, _ = build({
        "/proj/main.shar": "aayaat { mul } se './math'",
        "/proj/math.shar": MATH,
    })
    assert result.warnings == ["Module ./math does not export 'mul'"]
    assert 'const mul = __shar_mod_0["mul"];' in result.output


def test_duplicate_binding_is_skipped():
    result, _ = build({
        "/proj/main.shar": "aayaat { add } se './math'\naayaat { add } se './math'",
        "/proj/math.shar": MATH,
    })
    assert result.output.count("const add = ") == 1
    assert len(result.warnings) == 1


def test_each_build_has_its_own_cache():
    fs = MemoryFS({
        "/proj/main.shar": "aayaat { add } se './math'",
        "/proj/math.shar": MATH,
    })
    resolver = ModuleResolver(fs=fs)
    resolver.compile_file("/proj/main.shar")
    resolver.compile_file("/proj/main.shar")
    assert fs.reads["/proj/math.shar"] == 2


def test_missing_root_raises():
    with pytest.raises(SharImportError):
        build({}, root="/proj/missing.shar")


def test_sibling_type_spec_is_checked():
    result, _ = build({
        "/proj/main.shar": 'ye x = "hi"',
        "/proj/main.shari": "x: number",
    })
    assert result.type_result is not None
    assert len(result.type_result.errors) == 1
    assert result.has_type_errors
    # generation still happens so the output can be inspected
    assert 'let x = "hi";' in result.output


def test_no_type_spec_means_no_check():
    result, _ = build({"/proj/main.shar": 'ye x = "hi"'})
    assert result.type_result is None
    assert not result.has_type_errors


def test_imported_names_are_known_to_the_checker():
    result, _ = build({
        "/proj/main.shar": "aayaat { add } se './math'\nye total = add(1, 2)",
        "/proj/main.shari": "total: number",
        "/proj/math.shar": MATH,
    })
    assert result.type_result.warnings == []
    assert result.type_result.errors == []


def test_config_reaches_fetch_helper():
    result, _ = build(
        {"/proj/main.shar": "bol lao '/users'"},
        config=FetchConfig("https://api.example.com"),
    )
    assert 'const base = "https://api.example.com";' in result.output
    assert 'console.log(__shar_fetch("/users"));' in result.output


def test_compile_source_without_imports():
    resolver = ModuleResolver(fs=MemoryFS({}))
    result = resolver.compile_source("bol 1 + 2")
    assert result.path is None
    assert result.output.endswith("console.log(1 + 2);\n")


def test_real_filesystem(tmp_path):
    (tmp_path / "util.shar").write_text("niryaat karya double(n) { wapas n * 2 }", encoding="utf-8")
    main = tmp_path / "main.shar"
    main.write_text("aayaat { double } se 'util'\nbol double(21)", encoding="utf-8")

    result = compile_file(str(main))
    assert result.warnings == []
    assert "function double(n) {" in result.output
    assert 'const double = __shar_mod_0["double"];' in result.output


def test_filesystem_reports_missing_files(tmp_path):
    fs = FileSystem()
    assert not fs.exists(str(tmp_path / "nothing.shar"))
    assert fs.read(str(tmp_path / "nothing.shar")) is None


def test_nested_import_is_a_warning():
    result, _ = build({
        "/proj/main.shar": "{ aayaat { a } se './m' }\nbol a",
        "/proj/m.shar": "niryaat ye a = 1",
    })
    assert len(result.warnings) == 1
    assert "only top-level imports" in result.warnings[0]
    assert result.modules == []
