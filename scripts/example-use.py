import logging
from pathlib import Path

from fakeg import convert
from fakeg.parsers import Dialect, get_parser
from fakeg.utils import logger
from fakeg.visualize import plot_ir_spectrum

# logger.setLevel(logging.WARNING)
logger.setLevel(logging.DEBUG)

data_path = Path(__file__).resolve().parents[1] / "data"
examples = data_path / "calculations" / "examples"
out_folder = data_path / "calculations" / "converted"
out_folder.mkdir(parents=True, exist_ok=True)

jobs = {
    Dialect.AMESP: examples / "amesp" / "h2o" / "opt_freq.aop",
    Dialect.BDF: examples / "bdf" / "h2o" / "opt_freq.out",
    Dialect.XTB: examples / "xtb" / "h2o" / "g98.out",
    Dialect.XYZ: examples / "xyz" / "h2o" / "xtbopt_log.xyz",
}

run = {
    "convert": True,
    "plot": False,
}

if run["convert"]:
    for dialect, path in jobs.items():
        ok = convert(path, dialect, output_path=out_folder / f"{path.stem}_{dialect}_fake.log")
        print(f"{dialect}: {'ok' if ok else 'FAILED'}")

if run["plot"]:
    with open(jobs[Dialect.BDF]) as f:
        record, ok = get_parser(Dialect.BDF).parse(f)
    if ok:
        plot_ir_spectrum(record).show()
