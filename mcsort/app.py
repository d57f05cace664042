import argparse
import logging
import sys
from pathlib import Path

import yaml
from rich import print
from rich.logging import RichHandler

from .config import load_config, load_model_config
from .detection import build_detector
from .errors import DirectoryNotFound, FileOpenFailure, ModelLoadError
from .pipeline import DetectAndTrackPipeline, read_sequences_file, summarize

# Bad configuration (unknown detector, missing section, malformed YAML) is as
# fatal as a missing directory
FATAL_ERRORS = (DirectoryNotFound, FileOpenFailure, ModelLoadError, ValueError, yaml.YAMLError)


def parse_args(argv=None):
    p = argparse.ArgumentParser(description='Detect and track objects in image sequences.')
    p.add_argument('-s', '--sequences', type=str, required=True,
                   help='sequences file, relative to <data_dir>/config/')
    p.add_argument('-m', '--model', type=str, required=True,
                   help='model config file, relative to <model_dir>/config/')
    p.add_argument('--config', type=str, default=None,
                   help='runtime YAML config (e.g. configs/default.yaml)')
    p.add_argument('--workers', type=int, default=None,
                   help='sequences processed in parallel')
    p.add_argument('--log-level', type=str, default=None)
    return p.parse_args(argv)


def setup_logging(level: str):
    logging.basicConfig(
        level=level.upper(),
        format='%(message)s',
        datefmt='[%X]',
        handlers=[RichHandler(rich_tracebacks=True)],
    )


def main(argv=None):
    args = parse_args(argv)
    try:
        cfg = load_config(args.config)
    except FATAL_ERRORS as e:
        setup_logging(args.log_level or 'INFO')
        logging.getLogger('mcsort').error(f'Invalid config {args.config}: {e}')
        return 1
    runtime = cfg['runtime']
    setup_logging(args.log_level or runtime.get('log_level', 'INFO'))
    log = logging.getLogger('mcsort')

    data_dir = Path(cfg['paths']['data_dir'])
    model_dir = Path(cfg['paths']['model_dir'])
    workers = args.workers if args.workers is not None else int(runtime.get('workers', 1))

    try:
        model_cfg = load_model_config(model_dir, args.model)
        detector = build_detector(model_cfg['detector'])
        sequences = read_sequences_file(data_dir / 'config' / args.sequences)

        print(f'[bold green]Tracking {len(sequences)} sequences with {model_cfg["type"]}[/bold green]')
        pipe = DetectAndTrackPipeline(detector, model_cfg['type'], data_dir, cfg['tracker'])
        results = pipe.run(sequences, workers=workers)
    except FATAL_ERRORS as e:
        log.error(str(e))
        return 1

    for r in results:
        if r.skipped:
            print(f'Sequence: {r.sequence} [yellow](skipped, output exists)[/yellow]')
        else:
            print(f'Sequence: {r.sequence}  Duration: {r.duration_ms:.0f}ms ({r.fps:.1f}fps)')
    total = summarize(results)
    print(f'[bold green]Total duration: {total.duration_ms:.0f}ms ({total.fps:.1f}fps)[/bold green]')
    return 0


if __name__ == '__main__':
    sys.exit(main())
