import unittest

from mcp_rpg_structure.engine.formats import (
    FORMATS,
    detect_format,
    format_keys,
    get_format,
    is_valid_format,
)
from mcp_rpg_structure.errors import UnknownFormat
from mcp_rpg_structure.models.structure import FIELD_TYPES


class FormatTableTests(unittest.TestCase):
    def test_three_conventions(self):
        self.assertEqual(format_keys(), ["dcl-ds", "Dcl-ds", "DCL-DS"])
        for key in format_keys():
            self.assertTrue(is_valid_format(key))
            self.assertEqual(get_format(key).key, key)

    def test_lowercase_spellings(self):
        fmt = get_format("dcl-ds")
        self.assertEqual(
            (fmt.dclds, fmt.endds, fmt.template, fmt.qualified, fmt.varx, fmt.autox, fmt.dimx, fmt.inz),
            ("dcl-ds", "end-ds", "template", "qualified", "*var", "*auto", "dim", "inz"),
        )
        self.assertEqual(fmt.spell_type("timestamp"), "timestamp")

    def test_titlecase_spellings(self):
        fmt = get_format("Dcl-ds")
        self.assertEqual(fmt.dclds, "Dcl-ds")
        self.assertEqual(fmt.endds, "End-ds")
        self.assertEqual(fmt.varx, "*Var")
        self.assertEqual(fmt.autox, "*Auto")
        self.assertEqual(fmt.qualified, "Qualified")
        self.assertEqual(fmt.spell_type("varchar"), "Varchar")

    def test_uppercase_spellings(self):
        fmt = get_format("DCL-DS")
        self.assertEqual(fmt.endds, "END-DS")
        self.assertEqual(fmt.inz, "INZ")
        self.assertEqual(fmt.spell_type("packed"), "PACKED")

    def test_every_type_is_mapped_both_ways(self):
        for fmt in FORMATS.values():
            self.assertEqual(set(fmt.type_map), set(FIELD_TYPES))
            for tag in FIELD_TYPES:
                self.assertEqual(fmt.canonical_type(fmt.spell_type(tag)), tag)

    def test_reverse_lookup_ignores_case(self):
        fmt = get_format("dcl-ds")
        self.assertEqual(fmt.canonical_type("PACKED"), "packed")
        self.assertEqual(fmt.canonical_type("Ind"), "ind")
        self.assertIsNone(fmt.canonical_type("likeds"))

    def test_unknown_format(self):
        with self.assertRaises(UnknownFormat) as ctx:
            get_format("Dcl-DS")
        self.assertIn("known", ctx.exception.data)
        self.assertFalse(is_valid_format("dcl-pr"))

    def test_detect_format(self):
        self.assertEqual(detect_format("dcl-ds"), "dcl-ds")
        self.assertEqual(detect_format("Dcl-ds"), "Dcl-ds")
        self.assertEqual(detect_format("DCL-DS"), "DCL-DS")
        # mixed spellings fall back on their casing
        self.assertEqual(detect_format("Dcl-Ds"), "Dcl-ds")
        self.assertEqual(detect_format("dcl-DS"), "dcl-ds")


if __name__ == "__main__":
    unittest.main()
