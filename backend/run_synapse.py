import json
import logging
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))

from synapse.graph.graph_store import GraphStore  # noqa: E402
from synapse.llm.generator import GenerationRequest  # noqa: E402
from synapse.graph.graph_schema import DiagramType  # noqa: E402

from backend.app.dependencies import get_generator  # noqa: E402


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )
    logger = logging.getLogger("synapse.run")
    start = time.perf_counter()
    generator = get_generator()

    def run_request(label: str, request: GenerationRequest) -> None:
        result = generator.generate(request)
        elapsed = time.perf_counter() - start
        logger.info("[%s] result ready in %.2fs", label, elapsed)
        logger.info(
            json.dumps(
                {"answer": result.answer, **result.graph.to_dict()},
                indent=2,
            )
        )

        stats = GraphStore.from_graph_data(result.graph.to_dict()).stats()
        logger.info("[%s] stats %s", label, json.dumps(stats))
        if result.graph.is_empty():
            logger.warning("[%s] no graph could be extracted.", label)

    run_request(
        "text",
        GenerationRequest(
            text="Marie Curie won the Nobel Prize in Physics in 1903 with Pierre Curie.",
        ),
    )
    run_request(
        "question",
        GenerationRequest(
            question="How does photosynthesis turn light into chemical energy?",
            diagram_type=DiagramType.FLOWCHART,
        ),
    )


if __name__ == "__main__":
    main()
