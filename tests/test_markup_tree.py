from markup_tree import (
    closest,
    element,
    find_first,
    following_siblings,
    get_attr,
    has_attr_value,
    images,
    iter_elements,
    parse_markup,
    row_cells,
    table_rows,
    text_content,
)


def test_unclosed_cells_and_rows_are_closed_implicitly():
    root = parse_markup(
        "<table><tr><td>a<td>b<tr><td>c<td>d</table>"
    )
    table = find_first(root, "table")
    rows = table_rows(table)
    assert len(rows) == 2
    assert [text_content(c) for c in row_cells(rows[0])] == ["a", "b"]
    assert [text_content(c) for c in row_cells(rows[1])] == ["c", "d"]


def test_table_rows_skip_nested_tables_and_include_tbody():
    root = parse_markup(
        "<table id='outer'><tbody>"
        "<tr><td><table><tr><td>x</td></tr><tr><td>y</td></tr></table></td></tr>"
        "</tbody></table>"
    )
    outer = find_first(root, "table", lambda t: get_attr(t, "id") == "outer")
    assert len(table_rows(outer)) == 1
    assert len(list(iter_elements(root, "tr"))) == 3


def test_void_images_do_not_swallow_siblings():
    root = parse_markup('<td><img src="a_1.gif"><img src="b_1.gif"/><span>t</span></td>')
    td = find_first(root, "td")
    assert [get_attr(i, "src") for i in images(td)] == ["a_1.gif", "b_1.gif"]
    assert find_first(td, "span").parent is td


def test_stray_end_tags_are_ignored():
    root = parse_markup("<div></span><p>ok</p></div>")
    div = find_first(root, "div")
    assert text_content(div) == "ok"


def test_script_text_is_kept_verbatim():
    root = parse_markup("<script>var gX = 4; if (a < b) {}</script>")
    assert "a < b" in text_content(find_first(root, "script"))


def test_attribute_lookup_is_case_insensitive():
    root = parse_markup('<TABLE ALIGN="Center" CellPadding="0"></TABLE>')
    table = find_first(root, "table")
    assert has_attr_value(table, "align", "center")
    assert has_attr_value(table, "cellpadding", "0")
    assert not has_attr_value(table, "border", "0")


def test_hand_built_tree_supports_ancestor_and_sibling_queries():
    label = element("small", {}, "GOAL")
    cell = element("td", {}, label)
    row = element("tr", {}, element("td"), cell)
    heading = element("p", {}, element("big", {}, "NEXT SHAPES"))
    first = element("table", {"cellpadding": "15"})
    second = element("table", {"cellpadding": "0"})
    root = element("div", {}, element("table", {}, row), heading, first, element("br"), second)

    assert closest(label, "td") is cell
    assert closest(label, "tr") is row
    assert closest(label, "table").parent is root
    assert following_siblings(heading, "table") == [first, second]
    assert following_siblings(second) == []
