"""Building blocks of the HTML quality-control report."""

from __future__ import annotations

from datetime import datetime
from typing import TextIO

_UNITS = ("", "K", "M", "G", "T", "P")
PLOTLY_SRC = "plotly-1.2.0.min.js"

_CSS_RULES = (
    "td {border:1px solid #dddddd;padding:5px;font-size:12px;}",
    "table {border:1px solid #999999;padding:2x;border-collapse:collapse; width:800px}",
    ".col1 {width:240px; font-weight:bold;}",
    ".adapter_col {width:500px; font-size:10px;}",
    "img {padding:30px;}",
    "#menu {font-family:Consolas, 'Liberation Mono', Menlo, Courier, monospace;}",
    "#menu a {color:#0366d6; font-size:18px;font-weight:600;line-height:28px;"
    "text-decoration:none;font-family:-apple-system, BlinkMacSystemFont, 'Segoe UI', "
    "Helvetica, Arial, sans-serif, 'Apple Color Emoji', 'Segoe UI Emoji', 'Segoe UI Symbol'}",
    "a:visited {color: #999999}",
    ".alignleft {text-align:left;}",
    ".alignright {text-align:right;}",
    ".figure {width:800px;height:600px;}",
    ".header {color:#ffffff;padding:1px;height:20px;background:#000000;}",
    ".section_title {color:#ffffff;font-size:20px;padding:5px;text-align:left;"
    "background:#663355; margin-top:10px;}",
    ".subsection_title {font-size:16px;padding:5px;margin-top:10px;text-align:left;color:#663355}",
    "#container {text-align:center;padding:3px 3px 3px 10px;font-family:Arail,"
    "'Liberation Mono', Menlo, Courier, monospace;}",
    ".menu_item {text-align:left;padding-top:5px;font-size:18px;}",
    ".highlight {text-align:left;padding-top:30px;padding-bottom:30px;font-size:20px;"
    "line-height:35px;}",
    "#helper {text-align:left;border:1px dotted #fafafa;color:#777777;font-size:12px;}",
    "#footer {text-align:left;padding:15px;color:#ffffff;font-size:10px;background:#663355;"
    "font-family:Arail,'Liberation Mono', Menlo, Courier, monospace;}",
    ".kmer_table {text-align:center;font-size:8px;padding:2px;}",
    ".kmer_table td{text-align:center;font-size:8px;padding:0px;color:#ffffff}",
    ".sub_section_tips {color:#999999;font-size:10px;padding-left:5px;padding-bottom:3px;}",
)

_TOGGLE_JS = (
    "    function showOrHide(divname) {",
    "        div = document.getElementById(divname);",
    "        if(div.style.display == 'none')",
    "            div.style.display = 'block';",
    "        else",
    "            div.style.display = 'none';",
    "    }",
)


def format_number(number: int) -> str:
    """Integer as is below 1000, otherwise scaled with a K/M/G/T/P suffix."""
    num = float(number)
    order = 0
    while num > 1000.0 and order < len(_UNITS) - 1:
        order += 1
        num /= 1000.0
    if order == 0:
        return str(number)
    return f"{num:f} {_UNITS[order]}"


def get_percents(numerator: int, denominator: int) -> str:
    """numerator / denominator as a percentage string; "0.0" for a zero denominator."""
    if denominator == 0:
        return "0.0"
    return f"{numerator * 100.0 / denominator:f}"


def output_row(out: TextIO, key: str, value) -> None:
    """Write one two-column table row."""
    out.write(f"<tr><td class='col1'>{key}</td><td class='col2'>{value}</td></tr>\n")


def current_system_time() -> str:
    """Local time in the report's timestamp layout."""
    now = datetime.now()
    return (
        f"{now.year}-{now.month:02d}-{now.day:02d}      "
        f"{now.hour:02d}:{now.minute:02d}:{now.second:02d}"
    )


def _write_css(out: TextIO) -> None:
    out.write('<style type="text/css">\n')
    for rule in _CSS_RULES:
        out.write(rule + "\n")
    out.write("</style>\n")


def _write_js(out: TextIO) -> None:
    out.write(f"<script src='{PLOTLY_SRC}'></script>\n")
    out.write('\n<script type="text/javascript">\n')
    for line in _TOGGLE_JS:
        out.write(line + "\n")
    out.write("</script>\n")


def write_header(out: TextIO) -> None:
    """Write the document head, scripts and styles, and open the body."""
    out.write('<html><head><meta http-equiv="content-type" content="text/html;charset=utf-8" />')
    out.write(f"<title>readprep report at {current_system_time()} </title>")
    _write_js(out)
    _write_css(out)
    out.write("</head>")
    out.write("<body><div id='container'>")


def write_footer(out: TextIO, command: str, version: str) -> None:
    """Close the container and write the footer with the command line."""
    out.write("\n</div>\n")
    out.write("<div id='footer'> ")
    out.write(f"<p>{command}</p>")
    out.write(f"readprep {version}, at {current_system_time()} </div>")
    out.write("</body></html>")