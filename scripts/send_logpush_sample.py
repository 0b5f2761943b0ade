#!/usr/bin/env python3
"""
Post a gzipped NDJSON batch to a running NIMBUS instance, the way Logpush does
"""
import argparse
import gzip
import json
import sys
import time
import uuid

import requests

HTTP_SAMPLE = {
    "ClientIP": "198.51.100.7",
    "ClientRequestHost": "www.example.com",
    "ClientRequestMethod": "GET",
    "ClientRequestURI": "/",
    "EdgeResponseStatus": 200,
    "EdgeColoCode": "SJC",
    "CacheCacheStatus": "hit",
}


def build_batch(count: int) -> bytes:
    now_ns = int(time.time() * 1e9)
    lines = []
    for i in range(count):
        record = dict(HTTP_SAMPLE)
        record["RayID"] = uuid.uuid4().hex[:16]
        record["EdgeStartTimestamp"] = now_ns + i
        record["EdgeEndTimestamp"] = now_ns + i + 1000000
        lines.append(json.dumps(record))
    return gzip.compress("\n".join(lines).encode("utf-8"))


def main():
    parser = argparse.ArgumentParser(description='Send a sample Logpush batch')
    parser.add_argument('--url', default='http://localhost:3000/v1/ingest', help='Ingest endpoint')
    parser.add_argument('--token', required=True, help='INGEST_AUTH_TOKEN of the target')
    parser.add_argument('--count', type=int, default=10, help='Records to send (default: 10)')
    args = parser.parse_args()

    r = requests.post(
        args.url,
        params={"header_Authorization": f"Bearer {args.token}"},
        data=build_batch(args.count),
        headers={"Content-Encoding": "gzip", "Content-Type": "application/x-ndjson"},
        timeout=30,
    )
    print(f"{r.status_code} {r.text}")
    return 0 if r.ok else 1


if __name__ == "__main__":
    sys.exit(main())
