"""Saved-page fixtures shared by the extraction, solver and app tests."""

IMG = "http://images.neopets.com/medieval/shapeshifter"

BOARD_ROW_0 = (
    f'<tr><td><img src="{IMG}/shi_0.gif"></td>'
    f'<td><img src="{IMG}/swo_0.gif"></td>'
    f'<td><img src="{IMG}/swo_0.gif"></td></tr>'
)
BOARD_ROW_1 = (
    f'<tr><td><img src="{IMG}/swo_0.gif"></td>'
    f'<td><img src="{IMG}/pot_0.gif"></td>'
    f'<td><img src="{IMG}/swo_0.gif"></td></tr>'
)
BOARD_ATTRS = 'align="center" cellpadding="0" cellspacing="0" border="1"'

SQ = f'<img src="{IMG}/square.gif" width="20" height="20">'
BLANK = '<img src="http://images.neopets.com/blank.gif" width="20" height="20">'

# 3×2 board, cycle swo -> shi -> pot, goal shi.  One solution: the single
# square at (2,0), the domino at (1,1), the L piece at (0,0).
SAMPLE_PAGE = f"""<!DOCTYPE html>
<html>
<head>
<title>Shapeshifter</title>
<script type="text/javascript">
  var gX = 3;
  var gY = 2;
  var imgPath = "{IMG}/";
</script>
</head>
<body>
<div id="content">
<center>
<table border="0" cellpadding="2" cellspacing="0">
<tr>
  <td><img src="{IMG}/swo_0.gif"></td>
  <td><img src="{IMG}/arrow.gif"></td>
  <td><img src="{IMG}/shi_0.gif"></td>
  <td><img src="{IMG}/arrow.gif"></td>
  <td><img src="{IMG}/pot_0.gif"></td>
  <td><img src="{IMG}/arrow.gif"></td>
  <td align="center"><small>GOAL</small><br><img src="{IMG}/shi_0.gif"></td>
</tr>
</table>
<br>
<table {BOARD_ATTRS}>
{BOARD_ROW_0}
{BOARD_ROW_1}
</table>
</center>
<div class="shapes">
<p><big>ACTIVE SHAPE</big></p>
<table cellpadding="15" border="0"><tr><td>
  <table cellpadding="0" cellspacing="0"><tr><td>{SQ}</td></tr></table>
</td></tr></table>
<p><big>NEXT SHAPES</big></p>
<table cellpadding="15" border="0"><tr>
  <td><table cellpadding="0" cellspacing="0">
    <tr><td>{SQ}</td><td>{SQ}</td></tr>
  </table></td>
  <td><table cellpadding="0" cellspacing="0">
    <tr><td>{BLANK}</td><td>{BLANK}</td></tr>
    <tr><td>{BLANK}</td><td>{BLANK}</td></tr>
  </table></td>
  <td><table cellpadding="0" cellspacing="0">
    <tr><td>{BLANK}</td><td>{SQ}</td></tr>
    <tr><td>{SQ}</td><td>{SQ}</td></tr>
  </table></td>
</tr></table>
</div>
</div>
</body>
</html>
"""

SAMPLE_GRID = (1, 0, 0, 0, 2, 0)
SAMPLE_CYCLE = ("swo", "shi", "pot")
SAMPLE_SHAPES = ((0,), (0, 1), (1, 3, 4))
