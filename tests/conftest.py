"""Shared rocm-smi output samples and a fake command runner."""

import json

import pytest

CONCISE = """\
============================================ ROCm System Management Interface ============================================
====================================================== Concise Info ======================================================
Device  Node  IDs              Temp    Power   Partitions          SCLK     MCLK     Fan  Perf  PwrCap  VRAM%  GPU%
              (DID,     GUID)  (Edge)  (Avg)   (Mem, Compute, ID)
==========================================================================================================================
0       1     0x744c,   12345  38.0°C  32.0W   N/A, N/A, 0         800Mhz   96Mhz    0%   auto  300.0W  2%     0%
1       2     0x744c,   54321  91.0°C  285.0W  N/A, N/A, 0         2400Mhz  1249Mhz  35%  auto  300.0W  85%    97%
==========================================================================================================================
================================================== End of ROCm SMI Log ===================================================
"""

PRODUCT_NAME = """\
============================ ROCm System Management Interface ============================
====================================== Product Info ======================================
GPU[0]\t\t: Card Series: \t\tRadeon RX 7900 XTX
GPU[0]\t\t: Card Model: \t\t0x744c
GPU[1]\t\t: Card Series: \t\tRadeon PRO W7900
GPU[1]\t\t: Card Model: \t\t0x7448
==========================================================================================
"""

HARDWARE = """\
============================ ROCm System Management Interface ============================
================================ Concise Hardware Info =================================
GPU  NODE  DID     GUID   GFX VER  GFX RAS  SDMA RAS  UMC RAS  VBIOS          BUS           PARTITION ID
0    1     0x744c  12345  gfx1100  N/A      N/A       N/A      113-D7020100   0000:03:00.0  0
1    2     0x7448  54321  gfx1100  N/A      N/A       N/A      113-D7070100   0000:43:00.0  0
==========================================================================================
"""

MEMINFO = json.dumps({
    "card0": {"VRAM Total Memory (B)": "25753026560", "VRAM Total Used Memory (B)": "1031110656"},
    "card1": {"VRAM Total Memory (B)": 48301604864, "VRAM Total Used Memory (B)": 40265318400},
})

DRIVER = """\
============================ ROCm System Management Interface ============================
Driver version: 6.7.0
==========================================================================================
"""


class FakeRunner:
    """Stands in for run_cmd: maps an argument tuple to canned stdout."""

    def __init__(self, outputs):
        self.outputs = outputs
        self.calls = []

    def __call__(self, program, args):
        self.calls.append((program, tuple(args)))
        return self.outputs.get(tuple(args), "")


@pytest.fixture
def smi_outputs():
    return {
        (): CONCISE,
        ("--showmeminfo", "vram", "--json"): MEMINFO,
        ("--showproductname",): PRODUCT_NAME,
        ("--showhw",): HARDWARE,
        ("--showdriver",): DRIVER,
    }


@pytest.fixture
def fake_runner(smi_outputs):
    return FakeRunner(smi_outputs)
