"""
Shared test fixtures for pcbroute tests.

Provides a small KiCad board (as text, file, tree and model) and a
factory for building board models directly from pads and obstacles.
"""

import pytest
from pathlib import Path
from typing import Callable, Sequence, Tuple

from pcbroute.sexpr import Tree, parse
from pcbroute.board.model import (
    BoardModel,
    Footprint,
    General,
    Layer,
    LayerKind,
    Net,
    Pad,
    Via,
    Wire,
)
from pcbroute.routing.settings import RouteSettings


SAMPLE_BOARD = """\
(kicad_pcb (version 20221018) (generator pcbnew)
  (general
    (thickness 1.6)
  )
  (paper "A4")
  (layers
    (0 "F.Cu" signal)
    (31 "B.Cu" signal)
    (36 "B.SilkS" user "B.Silkscreen")
    (44 "Edge.Cuts" user)
  )
  (net 0 "")
  (net 1 "GND")
  (net 2 "VCC")
  (footprint "Resistor_SMD:R_0603_1608Metric" (layer "F.Cu")
    (at 2 2)
    (property "Reference" "R1" (at 0 -1.43 0) (layer "F.SilkS"))
    (pad "1" smd roundrect (at 0 0) (size 0.8 0.95) (layers "F.Cu" "F.Paste" "F.Mask") (net 1 "GND"))
    (pad "2" smd roundrect (at 4 0) (size 0.8 0.95) (layers "F.Cu" "F.Paste" "F.Mask") (net 2 "VCC"))
  )
  (footprint "Connector_PinHeader_2.54mm:PinHeader_1x02" (layer "F.Cu")
    (at 2 8)
    (fp_text reference "J1" (at 0 -2) (layer "F.SilkS"))
    (pad "1" thru_hole circle (at 0 0) (size 1.7 1.7) (drill 1) (layers "*.Cu" "*.Mask") (net 1 "GND"))
    (pad "2" thru_hole circle (at 4 0) (size 1.7 1.7) (drill 1) (layers "*.Cu" "*.Mask") (net 2 "VCC"))
  )
  (segment (start 10 0) (end 10 5) (width 0.25) (layer "B.Cu") (net 0))
  (via (at 12 12) (size 0.6) (drill 0.3) (layers "F.Cu" "B.Cu") (net 0))
)
"""


@pytest.fixture
def sample_board_text() -> str:
    """Two footprints, two nets, one existing segment and via."""
    return SAMPLE_BOARD


@pytest.fixture
def sample_board_file(tmp_path, sample_board_text) -> Path:
    """The sample board written to a .kicad_pcb file."""
    path = tmp_path / "sample.kicad_pcb"
    path.write_text(sample_board_text)
    return path


@pytest.fixture
def sample_tree(sample_board_text) -> Tree:
    """Parsed sample board with trivial nesting removed."""
    return parse(sample_board_text).remove_trivial()


@pytest.fixture
def sample_board(sample_tree) -> BoardModel:
    """Board model of the sample board."""
    return BoardModel.load(sample_tree)


@pytest.fixture
def sample_settings() -> RouteSettings:
    """A 20 x 20 mm grid at 1 mm spacing covering the sample board."""
    return RouteSettings(board_width=20.0, board_height=20.0, grid_spacing=1.0)


PadSpec = Tuple[float, float, int]


@pytest.fixture
def board_factory() -> Callable[..., BoardModel]:
    """Build a board model directly from pad positions and obstacles.

    Pads are given as (x, y, net_id) and placed in one footprint at the
    origin, so ``abs_at == (x, y)``.
    """
    def make_board(
        pads: Sequence[PadSpec],
        layer_names: Sequence[str] = ("F.Cu",),
        pad_layers: Sequence[str] = ("F.Cu",),
        wires: Sequence[Wire] = (),
        vias: Sequence[Via] = (),
    ) -> BoardModel:
        layers = tuple(
            Layer(id=i, name=name, kind=LayerKind.SIGNAL)
            for i, name in enumerate(layer_names)
        ) + (Layer(id=44, name="Edge.Cuts", kind=LayerKind.USER),)

        board_pads = tuple(
            Pad(layers=tuple(pad_layers), at=(x, y), abs_at=(x, y),
                number=str(i + 1), net_id=net_id)
            for i, (x, y, net_id) in enumerate(pads)
        )
        net_ids = sorted({net_id for _, _, net_id in pads})

        return BoardModel(
            general=General(thickness=1.6),
            layers=layers,
            nets=tuple(Net(id=n, name=f"N{n}") for n in net_ids),
            footprints=(Footprint(name="Test:Pads", layer="F.Cu", at=(0.0, 0.0),
                                  pads=board_pads),),
            wires=tuple(wires),
            vias=tuple(vias),
        )

    return make_board
