# deployment server
# compile + deploy one Solidity file, print the response a web frontend would receive
import argparse
import asyncio
import json
import os
import sys
from pathlib import Path

import sd_config as Config
from Blockchain.connector import ChainConnector
from SmDeployments.artifactStore import ArtifactStore
from SmDeployments.exceptions import DeploymentError
from SmDeployments.pipeline import DeploymentPipeline, error_response, response_for

logger = Config.get_logger(os.path.splitext(os.path.basename(__file__))[0])


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Compile and deploy a Solidity contract")
    parser.add_argument("source", type=Path, nargs="?", default=Config.CONTRACTS_DIR / "Demo.sol",
                        help="path to the .sol file")
    parser.add_argument("--name", default=None, help="contract to deploy (derived from source if omitted)")
    parser.add_argument("--rpc-url", default=Config.RPC_URL, help="JSON-RPC endpoint of the node")
    parser.add_argument("--no-store", action="store_true", help="do not write the artifact record")
    parser.add_argument("--arg", action="append", default=None, dest="ctor_args",
                        help="constructor argument (JSON literal), repeat in order")
    return parser.parse_args(argv)


def _parse_literal(value):
    try:
        return json.loads(value)
    except ValueError:
        return value


# run the whole pipeline for a single request
async def server(args):
    source_text = args.source.read_text(encoding="utf-8")
    policy = Config.DeployPolicy()
    pipeline = DeploymentPipeline(
        policy=policy,
        connector=ChainConnector(rpc_url=args.rpc_url, policy=policy),
        store=None if args.no_store else ArtifactStore(),
    )
    ctor_args = None
    if args.ctor_args is not None:
        ctor_args = [_parse_literal(v) for v in args.ctor_args]

    try:
        artifact = pipeline.compileSource(source_text, args.name)
        receipt = await pipeline.deployArtifact(artifact, constructor_args=ctor_args)
    except DeploymentError as err:
        logger.error(f"Deployment error: {err}")
        return 1, error_response(err)
    return 0, response_for(receipt, artifact)


def main(argv=None):
    args = parse_args(argv)
    code, response = asyncio.run(server(args))
    print(json.dumps(response, indent=2))
    return code


if __name__ == "__main__":
    sys.exit(main())
