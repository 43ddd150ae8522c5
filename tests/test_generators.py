from __future__ import annotations

from pathlib import Path
import json
import unittest

from xylo.compilation_database import create_compilation_database, render_compilation_database
from xylo.config_loader import BuildCommands, BuildCompiler, BuildConfig
from xylo.makefile import generate_makefile


BUILD = BuildConfig(compiler=BuildCompiler(exec="clang", args="-O2"), main_filename="src/main.c")


class MakefileGeneratorTests(unittest.TestCase):
    def test_minimal_makefile(self) -> None:
        text = generate_makefile(BUILD, "clang src/main.c -O2")

        self.assertEqual(
            text,
            "target/main.o: src/main.c\n"
            "\tclang src/main.c -O2\n"
            "\n"
            "build: target/main.o\n"
            "\tclang src/main.c -O2\n",
        )

    def test_hooks_surround_compile_command(self) -> None:
        hooks = BuildCommands(pre_build="echo pre", post_build="echo post")

        text = generate_makefile(BUILD, "clang src/main.c -O2", None, hooks)

        build_rule = text.split("\n\n")[1].splitlines()
        self.assertEqual(
            build_rule,
            ["build: target/main.o", "\techo pre", "\tclang src/main.c -O2", "\techo post"],
        )

    def test_single_hook_keeps_position(self) -> None:
        pre_only = generate_makefile(BUILD, "cc", None, BuildCommands(pre_build="echo pre"))
        post_only = generate_makefile(BUILD, "cc", None, BuildCommands(post_build="echo post"))

        self.assertTrue(pre_only.endswith("build: target/main.o\n\techo pre\n\tcc\n"))
        self.assertTrue(post_only.endswith("build: target/main.o\n\tcc\n\techo post\n"))

    def test_link_command_is_object_recipe(self) -> None:
        text = generate_makefile(BUILD, "clang src/main.c -c", "ld.lld src/main.c -o target/main")

        self.assertTrue(text.startswith("target/main.o: src/main.c\n\tld.lld src/main.c -o target/main\n"))
        self.assertIn("build: target/main.o\n\tclang src/main.c -c\n", text)

    def test_bare_main_name_maps_to_standard_layout(self) -> None:
        build = BuildConfig(compiler=BuildCompiler(exec="clang", args=""), main_filename="app")

        text = generate_makefile(build, "clang app")

        self.assertTrue(text.startswith("target/app.o: src/app.c\n"))

    def test_clean_hook_adds_clean_target(self) -> None:
        text = generate_makefile(BUILD, "cc", None, BuildCommands(clean="rm -f target/*"))

        self.assertTrue(text.endswith("\n\nclean:\n\trm -f target/*\n"))

    def test_output_is_deterministic(self) -> None:
        hooks = BuildCommands(pre_build="echo pre", post_build="echo post")

        first = generate_makefile(BUILD, "clang src/main.c -O2", "ld src/main.c", hooks)
        second = generate_makefile(BUILD, "clang src/main.c -O2", "ld src/main.c", hooks)

        self.assertEqual(first, second)


class CompilationDatabaseTests(unittest.TestCase):
    def test_single_entry_shape(self) -> None:
        entries = create_compilation_database(BUILD, "clang src/main.c -O2", Path("/abs/proj"))

        self.assertEqual(
            entries,
            [{"directory": "/abs/proj", "command": "clang src/main.c -O2", "file": "src/main.c"}],
        )

    def test_rendered_json(self) -> None:
        text = render_compilation_database(BUILD, "clang src/main.c -O2", "/abs/proj")

        self.assertEqual(
            text,
            '[{"directory":"/abs/proj","command":"clang src/main.c -O2","file":"src/main.c"}]',
        )
        self.assertEqual(
            json.loads(text),
            [{"directory": "/abs/proj", "command": "clang src/main.c -O2", "file": "src/main.c"}],
        )

    def test_relative_project_path_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            create_compilation_database(BUILD, "clang src/main.c", "relative/proj")

    def test_output_is_deterministic(self) -> None:
        first = render_compilation_database(BUILD, "clang src/main.c -O2", "/abs/proj")
        second = render_compilation_database(BUILD, "clang src/main.c -O2", "/abs/proj")

        self.assertEqual(first, second)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
