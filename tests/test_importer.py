import unittest

from mcp_rpg_structure.engine.importer import (
    find_spans,
    locate_and_parse_at_cursor,
    parse_all_top_level,
    select_span,
    split_lines,
    validate_parse_result,
)
from mcp_rpg_structure.models.parse_result import ParseResult
from mcp_rpg_structure.models.structure import StructureKind

NESTED_DOC = "\n".join([
    "dcl-ds outer qualified;",
    "   a char(1);",
    "   b char(1);",
    "   dcl-ds inner;",
    "      c char(1);",
    "      d char(1);",
    "      e char(1);",
    "   end-ds;",
    "   f char(1);",
    "   g char(1);",
    "end-ds;",
])


class CursorSelectionTests(unittest.TestCase):
    def test_simple_structure(self):
        text = "dcl-ds cust qualified dim(100);\n   id int(10);\nend-ds;"
        result = locate_and_parse_at_cursor(text, 1)
        self.assertTrue(result.success)
        self.assertEqual(result.header.name, "cust")
        self.assertEqual(result.header.kind, StructureKind.DEFAULT)
        self.assertEqual(result.header.dimension, "100")
        self.assertEqual(result.format, "dcl-ds")
        self.assertEqual((result.start_line, result.end_line), (0, 2))
        self.assertEqual(len(result.fields), 1)
        field = result.fields[0]
        self.assertEqual((field.id, field.name, field.type_tag, field.length), (0, "id", "int", "10"))
        self.assertEqual(result.errors, [])

    def test_boundary_lines_pick_outermost(self):
        for cursor in (0, 10):
            self.assertEqual(locate_and_parse_at_cursor(NESTED_DOC, cursor).header.name, "outer")

    def test_body_lines_pick_innermost(self):
        for cursor in (3, 5, 7):
            result = locate_and_parse_at_cursor(NESTED_DOC, cursor)
            self.assertEqual(result.header.name, "inner", cursor)
            self.assertEqual((result.start_line, result.end_line), (3, 7))
            self.assertEqual([f.name for f in result.fields], ["c", "d", "e"])
        for cursor in (1, 8):
            self.assertEqual(locate_and_parse_at_cursor(NESTED_DOC, cursor).header.name, "outer")

    def test_outer_keeps_nested_aggregate(self):
        result = locate_and_parse_at_cursor(NESTED_DOC, 0)
        self.assertEqual([f.name for f in result.fields], ["a", "b", "inner", "f", "g"])
        inner = result.fields[2]
        self.assertTrue(inner.is_aggregate)
        self.assertIsNone(inner.type_tag)
        self.assertEqual([c.id for c in inner.children], [3, 4, 5])
        self.assertEqual(result.fields[3].id, 6)

    def test_span_levels(self):
        scan = find_spans(split_lines(NESTED_DOC))
        self.assertEqual(sorted((s.start_line, s.end_line, s.level) for s in scan.spans), [(0, 10, 0), (3, 7, 1)])
        self.assertEqual(scan.unmatched, [])
        self.assertIsNone(select_span(scan.spans, 11))

    def test_no_structure(self):
        result = locate_and_parse_at_cursor("dcl-s x int(10);", 0)
        self.assertFalse(result.success)
        self.assertEqual(result.errors[0].code, "NoStructureFound")
        self.assertEqual(result.errors[0].severity, "error")
        self.assertFalse(validate_parse_result(result))

    def test_unclosed_structure(self):
        result = locate_and_parse_at_cursor("dcl-ds open qualified;\n   a int(10);", 1)
        self.assertFalse(result.success)
        self.assertEqual(result.errors[0].code, "UnmatchedAggregate")
        self.assertEqual(result.errors[0].line, 0)

    def test_crlf_line_endings(self):
        result = locate_and_parse_at_cursor("dcl-ds w qualified;\r\n   x ind;\r\nend-ds;\r\n", 2)
        self.assertTrue(result.success)
        self.assertEqual(result.fields[0].type_tag, "ind")


class HeaderAndFormatTests(unittest.TestCase):
    def test_uppercase_var_structure(self):
        text = "DCL-DS CUST QUALIFIED DIM(*VAR:10);\n   ID INT(10);\nEND-DS;"
        result = locate_and_parse_at_cursor(text, 0)
        self.assertTrue(result.success)
        self.assertEqual(result.format, "DCL-DS")
        self.assertEqual(result.header.kind, StructureKind.VAR_LENGTH)
        self.assertEqual(result.header.dimension, "10")
        self.assertEqual(result.fields[0].type_tag, "int")

    def test_titlecase_template(self):
        text = "Dcl-ds tpl Qualified Template;\n   flag Ind Inz(*On);\nEnd-ds;"
        result = locate_and_parse_at_cursor(text, 1)
        self.assertEqual(result.format, "Dcl-ds")
        self.assertEqual(result.header.kind, StructureKind.TEMPLATE)
        self.assertIsNone(result.header.dimension)
        self.assertEqual(result.fields[0].init, "*On")

    def test_auto_dimension(self):
        result = locate_and_parse_at_cursor("dcl-ds a qualified dim(*auto:5);\nend-ds;", 0)
        self.assertEqual(result.header.kind, StructureKind.AUTO_LENGTH)
        self.assertEqual(result.header.dimension, "5")
        self.assertEqual(result.fields, [])

    def test_named_close(self):
        result = locate_and_parse_at_cursor("dcl-ds cust;\n   id int(10);\nend-ds cust;", 1)
        self.assertTrue(result.success)
        self.assertEqual(result.end_line, 2)


class FieldBodyTests(unittest.TestCase):
    def test_keywords(self):
        text = "\n".join([
            "dcl-ds k qualified;",
            "   // comment lines are ignored",
            "",
            "   msg char(10) inz('a;b');",
            "   amt packed(13:2) inz(1.5) dim(12);",
            "   stamp timestamp;",
            "end-ds;",
        ])
        result = locate_and_parse_at_cursor(text, 0)
        self.assertTrue(result.success)
        self.assertEqual(result.errors, [])
        msg, amt, stamp = result.fields
        self.assertEqual(msg.init, "'a;b'")
        self.assertEqual((amt.length, amt.init, amt.repeat_count), ("13:2", "1.5", 12))
        self.assertIsNone(stamp.length)

    def test_unrecognized_lines_are_reported(self):
        text = "\n".join([
            "dcl-ds s qualified;",
            "   x like(y);",
            "   foo bar baz",
            "   n int(10) ccsid(37);",
            "   ok ind;",
            "end-ds;",
        ])
        result = locate_and_parse_at_cursor(text, 0)
        self.assertTrue(result.success)
        self.assertEqual([f.name for f in result.fields], ["ok"])
        self.assertEqual(result.fields[0].id, 0)
        self.assertEqual([(w.code, w.line) for w in result.warnings],
                         [("SkippedLine", 1), ("SkippedLine", 2), ("SkippedLine", 3)])

    def test_malformed_values_are_kept_with_warning(self):
        text = "dcl-ds m qualified;\n   p packed(2:13);\nend-ds;"
        result = locate_and_parse_at_cursor(text, 0)
        self.assertTrue(result.success)
        self.assertEqual(result.fields[0].length, "2:13")
        self.assertEqual(result.warnings[0].code, "MalformedField")
        self.assertEqual(result.warnings[0].line, 1)

    def test_non_ascii_digit_dimension_is_a_warning(self):
        text = "dcl-ds s qualified;\n   a int(10) dim(\u00b2);\n   b ind;\nend-ds;"
        result = locate_and_parse_at_cursor(text, 0)
        self.assertTrue(result.success)
        self.assertEqual([f.name for f in result.fields], ["b"])
        self.assertEqual([(w.code, w.line) for w in result.warnings], [("MalformedField", 1)])

    def test_substructure_without_close(self):
        text = "\n".join([
            "dcl-ds s qualified;",
            "   addr likeds(addr_t);",
            "      street char(30);",
            "      city char(20);",
            "   total int(10);",
            "end-ds;",
        ])
        result = locate_and_parse_at_cursor(text, 0)
        self.assertTrue(result.success)
        addr, total = result.fields
        self.assertTrue(addr.is_aggregate)
        self.assertEqual(addr.length, "addr_t")
        self.assertEqual([(c.id, c.name) for c in addr.children], [(1, "street"), (2, "city")])
        self.assertEqual((total.id, total.name), (3, "total"))

    def test_deep_nesting(self):
        text = "\n".join([
            "dcl-ds top qualified;",
            "   dcl-ds mid;",
            "      dcl-ds low dim(4);",
            "         x int(10);",
            "      end-ds;",
            "   end-ds;",
            "end-ds;",
        ])
        results = parse_all_top_level(text)
        self.assertEqual(len(results), 1)
        mid = results[0].fields[0]
        low = mid.children[0]
        x = low.children[0]
        self.assertEqual((mid.name, mid.id, low.name, low.id, low.length, x.name, x.id),
                         ("mid", 0, "low", 1, "4", "x", 2))


class ParseAllTests(unittest.TestCase):
    def test_top_level_structures_in_order(self):
        text = "\n".join([
            "dcl-ds one;",
            "   a ind;",
            "end-ds;",
            "dcl-s gap int(10);",
            "DCL-DS TWO;",
            "   B IND;",
            "END-DS;",
            "dcl-ds dangling;",
        ])
        results = parse_all_top_level(text)
        self.assertEqual([r.header.name for r in results], ["one", "TWO"])
        self.assertEqual([r.format for r in results], ["dcl-ds", "DCL-DS"])
        self.assertTrue(all(r.success for r in results))

    def test_empty_document(self):
        self.assertEqual(parse_all_top_level(""), [])


class ValidateResultTests(unittest.TestCase):
    def test_incomplete_results_are_rejected(self):
        self.assertFalse(validate_parse_result(ParseResult(success=True)))
        ok = locate_and_parse_at_cursor("dcl-ds a;\nend-ds;", 0)
        self.assertTrue(validate_parse_result(ok))
        ok.format = "Dcl-DS"
        self.assertFalse(validate_parse_result(ok))


if __name__ == "__main__":
    unittest.main()
