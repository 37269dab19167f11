"""config_loading.py

    python examples/config_loading.py --pairs "a=1|a=2|b=3"
"""
from dataclasses import dataclass
from pathlib import Path

from flagrouter import Router, load_config, option


@dataclass
class PairOptions:
    pairs: dict[str, list[int]] = option(long="pairs", dft="x=0", desc="Grouped values")


def show(opts: PairOptions) -> None:
    for key, values in opts.pairs.items():
        print(f"{key}: {sum(values)}")


config = load_config(Path(__file__).with_name("flagrouter.yaml"))
router = Router.cmdline("Sum grouped values.", config=config)
router.handle(show)

if __name__ == "__main__":
    router.run_cmdline()
