from __future__ import annotations

import unittest

from xylo.config_loader import BuildCompiler, BuildConfig, Config, Profile, StructureSpec
from xylo.errors import ProfileNotFound
from xylo.profiles import available_profiles, resolve


def _profile(name: str, args: str) -> Profile:
    return Profile(
        name=name,
        build=BuildConfig(compiler=BuildCompiler(exec="clang", args=args), main_filename="src/main.c"),
        structure=StructureSpec(),
    )


class ProfileResolverTests(unittest.TestCase):
    def setUp(self) -> None:
        self.debug = _profile("debug", "-g")
        self.release = _profile("release", "-O2")
        self.config = Config(default_profile="debug", profiles=(self.debug, self.release))

    def test_falls_back_to_default_profile(self) -> None:
        self.assertEqual(resolve(self.config), self.debug)
        self.assertEqual(resolve(self.config, None), self.debug)

    def test_explicit_name_wins_over_default(self) -> None:
        self.assertEqual(resolve(self.config, "release"), self.release)

    def test_missing_profile_fails(self) -> None:
        with self.assertRaises(ProfileNotFound) as ctx:
            resolve(self.config, "missing")

        self.assertEqual(ctx.exception.name, "missing")
        self.assertEqual(ctx.exception.available, ["debug", "release"])
        self.assertIn("Available profiles: debug, release", str(ctx.exception))

    def test_lookup_is_case_sensitive(self) -> None:
        with self.assertRaises(ProfileNotFound):
            resolve(self.config, "Release")

    def test_dangling_default_never_picks_another_profile(self) -> None:
        config = Config(default_profile="missing", profiles=(self.debug, self.release))

        with self.assertRaises(ProfileNotFound) as ctx:
            resolve(config)

        self.assertEqual(ctx.exception.name, "missing")

    def test_empty_config_fails(self) -> None:
        with self.assertRaises(ProfileNotFound) as ctx:
            resolve(Config(default_profile="debug"))

        self.assertIn("<none>", str(ctx.exception))

    def test_profile_not_found_is_lookup_error(self) -> None:
        with self.assertRaises(LookupError):
            resolve(self.config, "missing")

    def test_available_profiles_in_document_order(self) -> None:
        self.assertEqual(available_profiles(self.config), ["debug", "release"])


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
