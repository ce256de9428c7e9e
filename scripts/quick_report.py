from __future__ import annotations

import os
from pathlib import Path

from prompt_library.metrics import compute_metrics


def main() -> None:
    log_path = Path(os.getenv("LOG_PATH", "logs/prompt_requests.jsonl"))
    if not log_path.exists():
        print(f"No request log found at {log_path}")
        return

    summary = compute_metrics(log_path)
    print("Request count:", summary["request_count"])
    print("Not found:", summary["not_found_count"])

    if summary["top_prompts"]:
        print("Top prompts:")
        for name, count in summary["top_prompts"].items():
            print(f"  {name}: {count}")
    else:
        print("Top prompts: n/a")


if __name__ == "__main__":
    main()
