# coding=utf-8
"""
Test Suite for plugins

Tests for:
- Manifest discovery and parsing (JSON and TOML)
- Declarative rule conditions
- External script rules over stdin/stdout
"""
import json
import sys
import textwrap
import unittest

from base_test import PbrStudioTestCase, good_material, gray
from pbr_studio.errors import PluginConfigError
from pbr_studio.globs import Severity
from pbr_studio.operators.plugins.plugin_loader import PluginLoader, read_manifest
from pbr_studio.operators.plugins.plugin_ops import (
    MaxResolutionCondition,
    MaxTextureCountCondition,
    MinResolutionCondition,
    PowerOfTwoCondition,
    RequiredMapsCondition,
    ScriptCondition,
    parse_condition,
    parse_script_response,
    script_summary,
)
from pbr_studio.operators.validation.validator import Validator
from pbr_studio.utils.materials import MaterialSet

STUDIO_MANIFEST = {
    "name": "studio",
    "version": "1.2.0",
    "rules": [
        {
            "id": "studio_maps",
            "severity": "error",
            "condition": {"type": "required_maps", "maps": ["ao", "height"]},
        },
        {
            "id": "studio_max",
            "description": "No textures above 8 pixels",
            "condition": {"type": "max_resolution", "max_width": 8, "max_height": 8},
        },
    ],
    "presets": [{"id": "studio_1k", "name": "Studio 1K", "target_resolution": "1k"}],
}

MOBILE_TOML = textwrap.dedent(
    """
    name = "mobile"
    version = "0.1"

    [[rules]]
    id = "mobile_count"
    severity = "info"
    condition = { type = "max_texture_count", max = 3 }

    [[presets]]
    id = "mobile_weird"
    name = "Weird"
    target_resolution = "huge"
    include_lod = true
    """
)


def python_script(code):
    """Command and arguments that run a Python snippet with the current interpreter."""
    return {"type": "script", "command": sys.executable, "args": ["-c", textwrap.dedent(code)]}


class TestManifests(PbrStudioTestCase):
    def write_json_plugin(self, relpath, manifest):
        path = self.tmp / relpath / "plugin.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(manifest), encoding="utf-8")
        return path.parent

    def write_toml_plugin(self, relpath, text):
        path = self.tmp / relpath / "plugin.toml"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path.parent

    def test_read_json_manifest(self):
        manifest = read_manifest(self.write_json_plugin("studio", STUDIO_MANIFEST))
        self.assertEqual(manifest.name, "studio")
        self.assertEqual(manifest.version, "1.2.0")
        self.assertEqual([rule.id for rule in manifest.rules], ["studio_maps", "studio_max"])
        self.assertEqual(manifest.rules[1].severity, "major")
        self.assertIsInstance(manifest.rules[0].condition, RequiredMapsCondition)
        self.assertEqual(manifest.presets[0].max_dimension, 1024)

    def test_read_toml_manifest(self):
        manifest = read_manifest(self.write_toml_plugin("mobile", MOBILE_TOML))
        self.assertEqual(manifest.rules[0].condition, MaxTextureCountCondition(3))
        preset = manifest.presets[0]
        self.assertTrue(preset.include_lod)
        self.assertEqual(preset.max_dimension, 2048)

    def test_json_wins_over_toml(self):
        folder = self.write_json_plugin("both", STUDIO_MANIFEST)
        self.write_toml_plugin("both", MOBILE_TOML)
        self.assertEqual(read_manifest(folder).name, "studio")

    def test_directory_without_manifest(self):
        (self.tmp / "empty").mkdir()
        self.assertIsNone(read_manifest(self.tmp / "empty"))

    def test_malformed_manifests_raise(self):
        bad = self.tmp / "bad"
        bad.mkdir()
        (bad / "plugin.json").write_text("{not json", encoding="utf-8")
        with self.assertRaises(PluginConfigError):
            read_manifest(bad)

        self.write_json_plugin("unknown", {"name": "x", "rules": [{"id": "r", "condition": {"type": "nope"}}]})
        with self.assertRaises(PluginConfigError):
            read_manifest(self.tmp / "unknown")

        self.write_json_plugin("noname", {"rules": []})
        with self.assertRaises(PluginConfigError):
            read_manifest(self.tmp / "noname")

    def test_loader_discovery_order(self):
        root = self.tmp / "plugins"
        self.write_toml_plugin("plugins/b_mobile", MOBILE_TOML)
        self.write_json_plugin("plugins/a_studio", STUDIO_MANIFEST)
        self.write_json_plugin("plugins", {"name": "root", "version": "9"})

        loader = PluginLoader([self.tmp / "missing", root])
        infos = loader.list_loaded()
        self.assertEqual([info.name for info in infos], ["studio", "mobile", "root"])
        self.assertEqual(infos[0].rule_ids, ("studio_maps", "studio_max"))
        self.assertEqual(infos[1].preset_ids, ("mobile_weird",))
        self.assertEqual(infos[2].path, root)

        rules = loader.load_rules()
        self.assertEqual([rule.rule_id for rule in rules], ["studio_maps", "studio_max", "mobile_count"])
        self.assertEqual(rules[0].description, "Custom rule from plugin config")
        self.assertEqual(rules[1].description, "No textures above 8 pixels")
        self.assertEqual(loader.find_preset("studio_1k").name, "Studio 1K")
        self.assertIsNone(loader.find_preset("nope"))

    def test_validator_with_plugins(self):
        self.write_json_plugin("plugins/studio", STUDIO_MANIFEST)
        loader = PluginLoader().add_dir(self.tmp / "plugins")
        validator = Validator.with_plugins(loader)
        self.assertEqual(validator.rule_ids[-2:], ["studio_maps", "studio_max"])

        issues = validator.check(good_material(size=16))
        self.assertRuleIds(issues, ["studio_max"])
        self.assertEqual(issues[0].severity, Severity.MAJOR)
        self.assertEqual(issues[0].message, "Resolution 16x16 exceeds max 8x8")

        material = good_material(size=8)
        material.set("height", None)
        issues = validator.check(material)
        self.assertRuleIds(issues, ["studio_maps"])
        self.assertEqual(issues[0].severity, Severity.CRITICAL)
        self.assertEqual(issues[0].message, "Missing required maps: height")


class TestConditions(PbrStudioTestCase):
    def test_resolution_conditions(self):
        material = MaterialSet(albedo=gray(16, 8, 100))
        self.assertEqual(MaxResolutionCondition(16, 8).evaluate(material, "r", Severity.MINOR), [])
        issues = MinResolutionCondition(32, 8).evaluate(material, "r", Severity.MINOR)
        self.assertEqual(issues[0].message, "Resolution 16x8 below min 32x8")
        self.assertEqual(MinResolutionCondition(1, 1).evaluate(MaterialSet(), "r", Severity.MINOR), [])

    def test_power_of_two_condition(self):
        material = MaterialSet(albedo=gray(16, 16, 1), ao=gray(10, 16, 1))
        issues = PowerOfTwoCondition().evaluate(material, "pot", Severity.MINOR)
        self.assertEqual(issues[0].message, "Non-power-of-two: ao (10x16)")

    def test_texture_count_condition(self):
        issues = MaxTextureCountCondition(2).evaluate(good_material(), "count", Severity.MINOR)
        self.assertEqual(issues[0].message, "Texture count 6 exceeds max 2")

    def test_bad_parameters_raise(self):
        with self.assertRaises(PluginConfigError):
            parse_condition({"type": "max_resolution", "max_width": 8})
        with self.assertRaises(PluginConfigError):
            parse_condition({"type": "max_texture_count", "max": -1})
        with self.assertRaises(PluginConfigError):
            parse_condition({"type": "script"})
        with self.assertRaises(PluginConfigError):
            parse_condition("required_maps")

    def test_script_timeout_comes_from_loader(self):
        condition = parse_condition({"type": "script", "command": "check"}, script_timeout=5.0)
        self.assertEqual(condition, ScriptCondition("check"))
        self.assertEqual(condition.timeout, 5.0)


class TestScriptRules(PbrStudioTestCase):
    def run_script(self, code, timeout=10.0, material=None):
        params = python_script(code)
        condition = ScriptCondition.from_dict(params, timeout)
        return condition.evaluate(material or good_material(), "script_rule", Severity.MAJOR)

    def test_script_receives_summary_and_reports_issues(self):
        issues = self.run_script(
            """
            import json, sys
            request = json.load(sys.stdin)
            message = "{} has {} maps".format(request["name"], request["texture_count"])
            print(json.dumps({"issues": [
                {"rule_id": "ignored", "severity": "warning", "message": message},
                {"rule_id": "ignored", "severity": "strange", "message": "second"},
            ]}))
            """
        )
        self.assertRuleIds(issues, ["script_rule", "script_rule"])
        self.assertEqual(issues[0].message, "Good has 6 maps")
        self.assertEqual(issues[0].severity, Severity.MAJOR)
        self.assertEqual(issues[1].severity, Severity.MAJOR)

    def test_empty_issue_list(self):
        self.assertEqual(self.run_script('print(\'{"issues": []}\')'), [])

    def test_non_zero_exit_is_minor_issue(self):
        issues = self.run_script("import sys; sys.exit(3)")
        self.assertEqual(len(issues), 1)
        self.assertEqual(issues[0].severity, Severity.MINOR)
        self.assertIn("exit 3", issues[0].message)

    def test_malformed_output_yields_nothing(self):
        self.assertEqual(self.run_script("print('not json')"), [])
        self.assertEqual(self.run_script('print(\'{"issues": [{"message": "x"}]}\')'), [])

    def test_undecodable_output_yields_nothing(self):
        issues = self.run_script("import sys; sys.stdout.buffer.write(b'\\xff\\xfe garbage')")
        self.assertEqual(issues, [])

    def test_timeout_is_minor_issue(self):
        issues = self.run_script("import time; time.sleep(10)", timeout=0.5)
        self.assertEqual(len(issues), 1)
        self.assertEqual(issues[0].severity, Severity.MINOR)
        self.assertIn("timed out", issues[0].message)

    def test_missing_command_is_minor_issue(self):
        condition = ScriptCondition(str(self.tmp / "no-such-command"))
        issues = condition.evaluate(good_material(), "script_rule", Severity.CRITICAL)
        self.assertEqual(len(issues), 1)
        self.assertEqual(issues[0].severity, Severity.MINOR)
        self.assertIn("failed to run", issues[0].message)

    def test_parse_script_response(self):
        output = json.dumps({"issues": [{"rule_id": "a", "severity": "error", "message": "m"}]})
        issues = parse_script_response(output, "configured")
        self.assertEqual(issues[0].rule_id, "configured")
        self.assertEqual(issues[0].severity, Severity.CRITICAL)
        self.assertEqual(parse_script_response("[]", "configured"), [])
        self.assertEqual(parse_script_response("{}", "configured"), [])

    def test_script_summary(self):
        summary = script_summary(good_material(size=4))
        self.assertEqual(summary["name"], "Good")
        self.assertEqual(summary["dimensions"], {"width": 4, "height": 4})
        self.assertTrue(summary["maps"]["ao"])
        self.assertIsNone(script_summary(MaterialSet())["path"])

    def test_script_summary_with_empty_name(self):
        summary = script_summary(MaterialSet(name=""))
        self.assertEqual(summary["path"], "")
        self.assertEqual(summary["name"], "")


if __name__ == "__main__":
    unittest.main()
