"""Lightweight REST client for the pelada API."""

from __future__ import annotations

import argparse
import json

import httpx


def _print(resp: httpx.Response) -> None:
    if resp.status_code == 404:
        raise SystemExit(f"not found: {resp.request.url}")
    if resp.status_code >= 400:
        raise SystemExit(f"{resp.status_code}: {resp.text}")
    print(json.dumps(resp.json(), indent=2))


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the pelada REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("match_id", help="Match to operate on")
    parser.add_argument("--role", default="player", choices=["player", "admin", "super"], help="Caller role")
    parser.add_argument("--draw", action="store_true", help="Draw balanced teams and save them")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the draw")
    parser.add_argument("--unlock", action="store_true", help="Unlock saved teams before drawing")
    parser.add_argument("--status", action="store_true", help="Show the voting status dashboard")
    parser.add_argument("--summary", action="store_true", help="Show the match summary")
    args = parser.parse_args()

    params = {"role": args.role}
    with httpx.Client(base_url=args.base_url) as client:
        if args.unlock:
            _print(client.post(f"/matches/{args.match_id}/teams/unlock", params=params))
        if args.draw:
            resp = client.post(f"/matches/{args.match_id}/teams/draw", params=params, json={"seed": args.seed})
            if resp.status_code >= 400:
                raise SystemExit(f"{resp.status_code}: {resp.text}")
            drawn = resp.json()
            print(
                "Drawn teams: A={} ({}) B={} ({})".format(
                    len(drawn["team_a"]),
                    drawn["team_a_overall"],
                    len(drawn["team_b"]),
                    drawn["team_b_overall"],
                )
            )
            _print(
                client.put(
                    f"/matches/{args.match_id}/teams",
                    params=params,
                    json={"team_a": drawn["team_a"], "team_b": drawn["team_b"]},
                )
            )
        if args.status:
            _print(client.get(f"/matches/{args.match_id}/voting-status", params=params))
        if args.summary:
            _print(client.get(f"/matches/{args.match_id}/summary", params=params))


if __name__ == "__main__":
    main()
