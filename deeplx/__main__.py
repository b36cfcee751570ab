"""
/**
 * @file deeplx/__main__.py
 * @description 本地启动入口：python -m deeplx。
 */
"""

import argparse
import os

import uvicorn


def main():
    parser = argparse.ArgumentParser(description="Run the DeepLX translation proxy")
    parser.add_argument("--host", default=os.getenv("HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", "1188")))
    args = parser.parse_args()
    uvicorn.run("deeplx.main:app", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
