# main.py
import argparse
import json
import logging
import queue
import sys

import config
from path_service import PathStatus, handle_path_request, path_to_product
from scan_simulation import SimulatedScanner
from store_map import ConfigurationError, build_store_map, load_store_map
from tracking import TrackingLoop, TrackingSession

logger = logging.getLogger(__name__)


def parse_cell(text):
    try:
        x, y = (int(v) for v in text.split(','))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected x,y but got {text!r}")
    return x, y


def load_store(args):
    if args.config:
        return load_store_map(args.config)
    return build_store_map()


def run_path(args, store_map):
    start = args.start
    if args.product:
        try:
            result = path_to_product(start, args.product, store_map)
        except KeyError:
            print(f"Unknown product {args.product!r}", file=sys.stderr)
            return 1
    elif args.end is not None:
        end = args.end
        result = handle_path_request({'start': {'x': start[0], 'y': start[1]}, 'end': {'x': end[0], 'y': end[1]}},
                                     store_map)
    else:
        print("Give either --to or --product", file=sys.stderr)
        return 1

    print(json.dumps(result.to_dict()))
    return 0 if result.ok else 1


def run_simulation(args, store_map):
    product = store_map.find_product(args.product)
    if product is None:
        print(f"Unknown product {args.product!r}", file=sys.stderr)
        return 1

    route = path_to_product(args.start, product.name, store_map)
    if route.status is not PathStatus.OK:
        print(f"Cannot route to {product.name}: {route.status.message}", file=sys.stderr)
        return 1

    print(f"Walking to {product.name} ({product.zone}) along {len(route.path)} cells")
    session = TrackingSession(store_map, initial_position=args.start)
    scanner = SimulatedScanner(store_map, route.path, seed=args.seed, noise_std_db=args.noise)
    loop = TrackingLoop(session, scanner, interval=args.interval)
    updates = loop.subscribe()

    last = None
    with loop:
        # one extra scan once the shopper stands at the product
        for _ in range(len(route.path) + 1):
            try:
                update = updates.get(timeout=max(5.0, args.interval * 5))
            except queue.Empty:
                logger.error("Tracking loop stopped publishing")
                break
            last = update
            where = update.position if update.localized else f"{update.position} (kept)"
            print(f"estimate={where} zone={update.zone or '-'}")
            if update.event is not None:
                print(f"  >> {update.event.describe()}")

    if args.plot and last is not None:
        from visualization import render_store_map
        render_store_map(store_map, args.plot, position=last.position, zone=last.zone,
                         target=product.cell, target_name=product.name, path=route.path)
        print(f"Map written to {args.plot}")
    return 0


def run_serve(args, store_map):
    from server import run_server
    run_server(store_map, host=args.host, port=args.port)
    return 0


def build_parser():
    parser = argparse.ArgumentParser(description="Wi-Fi indoor positioning, zone tracking and store navigation")
    parser.add_argument('--config', help="store configuration JSON (defaults to the built-in layout)")
    parser.add_argument('--log-level', default=config.LOG_LEVEL)
    sub = parser.add_subparsers(dest='command', required=True)

    p_path = sub.add_parser('path', help="compute a path between two cells")
    p_path.add_argument('--from', dest='start', type=parse_cell, default=config.ENTRANCE_CELL)
    p_path.add_argument('--to', dest='end', type=parse_cell)
    p_path.add_argument('--product')
    p_path.set_defaults(func=run_path)

    p_sim = sub.add_parser('simulate', help="walk to a product with simulated Wi-Fi scans")
    p_sim.add_argument('product')
    p_sim.add_argument('--from', dest='start', type=parse_cell, default=config.ENTRANCE_CELL)
    p_sim.add_argument('--interval', type=float, default=0.2)
    p_sim.add_argument('--noise', type=float, default=config.NOISE_STD_DEV_DB)
    p_sim.add_argument('--seed', type=int)
    p_sim.add_argument('--plot', help="write the final map to this image file")
    p_sim.set_defaults(func=run_simulation)

    p_serve = sub.add_parser('serve', help="run the pathfinding HTTP API")
    p_serve.add_argument('--host', default=config.SERVER_HOST)
    p_serve.add_argument('--port', type=int, default=config.SERVER_PORT)
    p_serve.set_defaults(func=run_serve)
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format=config.LOG_FORMAT)

    try:
        store_map = load_store(args)
    except ConfigurationError as e:
        logger.error("Invalid store configuration: %s", e)
        return 2
    return args.func(args, store_map)


if __name__ == "__main__":
    sys.exit(main())
