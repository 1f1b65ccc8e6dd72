#!/usr/bin/env python3
import requests
import sys

def check_metrics(url="http://localhost:9140/metrics"):
    print(f"Checking metrics at {url}...")
    try:
        response = requests.get(url, timeout=15)
        response.raise_for_status()
    except Exception as e:
        print(f"FAILURE: Could not reach metrics endpoint: {e}")
        print("This suggests the exporter is not running or failed to bind its listen address.")
        return 1

    print("SUCCESS: Metrics endpoint is reachable.")
    print("-" * 40)

    samples = [
        line for line in response.text.splitlines()
        if line.startswith("mirth_") and not line.startswith("#")
    ]
    up = [line for line in samples if line.startswith("mirth_up ")]
    if not up:
        print("WARNING: No 'mirth_up' sample found. Is this the Mirth exporter?")
        return 1

    for m in samples:
        print(m)

    if up[0].split()[-1] != "1.0":
        print("WARNING: mirth_up is 0, the exporter could not query mccommand. Check its log.")
        return 1
    return 0

if __name__ == "__main__":
    sys.exit(check_metrics(*sys.argv[1:2]))
