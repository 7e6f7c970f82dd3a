import argparse

import uvicorn

from outlet_pos.core.logging import setup_logging


def parse_args():
    parser = argparse.ArgumentParser(description="Serve the POS API for the desktop client.")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address.")
    parser.add_argument("--port", type=int, default=5000, help="Bind port.")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes.")
    return parser.parse_args()


def main():
    setup_logging()
    args = parse_args()
    uvicorn.run(
        "outlet_pos.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_config=None,
    )


if __name__ == "__main__":
    main()
