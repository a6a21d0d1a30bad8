#!/usr/bin/env python3
"""PointPillars detection replay.

Runs recorded sweeps through preprocessing, an inference engine and box
decoding, and writes the detected objects as CSV.

Usage:
    python run.py sweeps/ --engine my_engine:build
    python run.py sweeps/ --engine my_engine:build --config detection.yaml
    python run.py sweeps/ --engine my_engine:build --output objects.csv
    python run.py sweeps/ --engine my_engine:build --corners corners.csv
"""
import argparse
import logging
import os
import sys
import time

import numpy as np

from pillar_detection.config import DetectionConfig, load_config
from pillar_detection.numba_kernels import warmup as numba_warmup
from pillar_detection.output import write_corners_csv, write_objects_csv
from pillar_detection.pipeline import PointPillarsDetection, STAGES
from pillar_detection.replay import list_sweep_files, load_engine, replay


def main():
    parser = argparse.ArgumentParser(
        description='PointPillars detection replay\n\n'
                    'Process a folder of .npz sweeps and write detected '
                    'objects to CSV.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('sweep_dir', help='Folder of .npz sweep files')
    parser.add_argument('--engine', required=True,
                        help="Inference engine factory, 'module:callable'")
    parser.add_argument('--config', default=None,
                        help='Path to YAML config file (default: built-in)')
    parser.add_argument('--output', default=None,
                        help='Output CSV (default: objects.csv in sweep_dir)')
    parser.add_argument('--corners', default=None,
                        help='Also write the 8 sensor/world corners of '
                             'every object to this CSV')
    parser.add_argument('--verbose', action='store_true',
                        help='Log per-sweep point counts and timings')
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format='[%(name)s] %(levelname)s: %(message)s')

    sweep_dir = os.path.abspath(args.sweep_dir)
    if not os.path.isdir(sweep_dir):
        print(f"Error: sweep folder not found: {sweep_dir}")
        sys.exit(1)

    if args.config:
        config_path = os.path.abspath(args.config)
        if not os.path.isfile(config_path):
            print(f"Error: Config file not found: {config_path}")
            sys.exit(1)
        config = load_config(config_path)
    else:
        config_path = '(defaults)'
        config = DetectionConfig()

    out_path = (os.path.abspath(args.output) if args.output
                else os.path.join(sweep_dir, 'objects.csv'))

    sweep_files = list_sweep_files(sweep_dir)
    print("=" * 60)
    print("  PointPillars Detection Replay")
    print("=" * 60)
    print(f"  Sweeps:  {sweep_dir} ({len(sweep_files)} files)")
    print(f"  Config:  {config_path}")
    print(f"  Engine:  {args.engine}")
    print(f"  Output:  {out_path}")
    if args.corners:
        print(f"  Corners: {os.path.abspath(args.corners)}")
    print("=" * 60)

    if not sweep_files:
        print("[Replay] No .npz sweeps found.")
        return

    print("[Replay] Compiling Numba JIT kernels...")
    numba_warmup()

    engine = load_engine(args.engine, config.engine)
    detector = PointPillarsDetection(engine, config)

    t0 = time.time()
    frames, timings = replay(detector, sweep_files)
    elapsed = time.time() - t0

    num_objects = sum(len(objects) for _, objects in frames)
    print(f"\n[Replay] Done. {len(frames)}/{len(sweep_files)} sweeps, "
          f"{num_objects} objects in {elapsed:.1f}s")
    if timings:
        for stage in STAGES:
            mean_ms = 1000.0 * np.mean([t[stage] for t in timings])
            print(f"[Replay]   {stage:<15s} {mean_ms:8.2f} ms")

    write_objects_csv(out_path, frames)
    print(f"[Replay] Objects written to: {out_path}")
    if args.corners:
        corners_path = os.path.abspath(args.corners)
        write_corners_csv(corners_path, frames)
        print(f"[Replay] Corners written to: {corners_path}")


if __name__ == '__main__':
    main()
