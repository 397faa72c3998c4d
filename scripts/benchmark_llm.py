"""
Completion service benchmark.
Measures response times and parse yield for each prompt kind.
"""

import asyncio
import time
import sys
import os
import argparse
from typing import Any, Callable, Dict, Optional
from statistics import mean, median

sys.path.append(os.getcwd())

from thinkcheck.core.config import settings
from thinkcheck.core.exceptions import CompletionError, JSONParseError
from thinkcheck.core.llm import CompletionClient, CompletionRequest
from thinkcheck.core.parsers import EvaluationOutputParser, McqOutputParser, NotesOutputParser
from thinkcheck.core.prompt_manager import get_prompt_manager


class LLMBenchmark:
    """Benchmark the completion service per prompt kind."""

    def __init__(self):
        self.client = CompletionClient(settings=settings)
        self.prompts = get_prompt_manager()
        self.results: Dict[str, Dict[str, Any]] = {}

    async def benchmark_task(
        self,
        task: str,
        prompt: str,
        count_items: Optional[Callable[[str], int]] = None,
        iterations: int = 5
    ) -> Dict[str, Any]:
        """Benchmark one prompt kind; count_items reports how many items parsed."""

        print(f"\n🧪 Testing {task}...")
        print(f"   Prompt length: {len(prompt)} chars")

        request = CompletionRequest.for_task(task, prompt)
        times = []
        parsed = []
        errors = 0

        for i in range(iterations):
            try:
                start = time.time()
                text = await self.client.generate(request)
                elapsed = time.time() - start
                times.append(elapsed)

                items = count_items(text) if count_items else 1
                parsed.append(items)
                print(f"   Iteration {i+1}/{iterations}: {elapsed:.2f}s ({len(text)} chars, {items} item(s))")

            except (CompletionError, JSONParseError) as e:
                errors += 1
                print(f"   Iteration {i+1}/{iterations}: ERROR - {str(e)[:50]}")

        if not times:
            return {"task": task, "iterations": iterations, "successful": 0, "errors": errors}

        return {
            "task": task,
            "iterations": iterations,
            "successful": len(times),
            "errors": errors,
            "mean_time": mean(times),
            "median_time": median(times),
            "min_time": min(times),
            "max_time": max(times),
            "mean_items": mean(parsed),
        }

    async def run(self, iterations: int = 5, num_questions: int = 5):
        print("=" * 70)
        print("COMPLETION SERVICE BENCHMARK")
        print("=" * 70)
        print(f"\nProvider: {self.client.provider.value} ({self.client.model})")
        print(f"Iterations per task: {iterations}")
        print(f"Timeout: {settings.LLM_TIMEOUT_SECONDS}s")

        topic = "Python decorators"
        mcq_prompt = self.prompts.load_prompt(
            "mcq", NUM_QUESTIONS=num_questions, TOPIC=topic, DIFFICULTY="medium", CATEGORIES=""
        )
        evaluation_prompt = self.prompts.load_prompt(
            "evaluation",
            TOPIC=topic,
            DIFFICULTY="medium",
            QUESTION="What does functools.wraps do?",
            ANSWER="It copies the wrapped function's name and docstring onto the wrapper.",
        )
        notes_prompt = self.prompts.load_prompt(
            "notes", SUBJECT=topic, LEVEL="intermediate", FORMAT="structured"
        )

        self.results["mcq"] = await self.benchmark_task(
            "mcq", mcq_prompt, lambda text: len(McqOutputParser().parse(text)), iterations
        )
        self.results["evaluation"] = await self.benchmark_task(
            "evaluation", evaluation_prompt, lambda text: int(bool(EvaluationOutputParser().parse(text))), iterations
        )
        self.results["notes"] = await self.benchmark_task(
            "notes", notes_prompt, lambda text: len(NotesOutputParser(subject=topic).parse(text).sections), iterations
        )

        print("\n\n📊 SUMMARY")
        print("=" * 70)

        for task, result in self.results.items():
            print(f"\n{task.upper()}:")
            if result.get("successful", 0) > 0:
                print(f"   Success rate: {result['successful']}/{result['iterations']}")
                print(f"   Mean time: {result['mean_time']:.2f}s")
                print(f"   Median time: {result['median_time']:.2f}s")
                print(f"   Range: {result['min_time']:.2f}s - {result['max_time']:.2f}s")
                print(f"   Mean parsed items: {result['mean_items']:.1f}")
            else:
                print("   ❌ All attempts failed")

        evaluation = self.results["evaluation"]
        if evaluation.get("successful", 0) > 0:
            limit = settings.EVALUATION_TIMEOUT_SECONDS
            if evaluation["max_time"] < limit:
                print(f"\n✅ Every evaluation finished under the {limit}s per-answer limit")
            else:
                print(f"\n⚠️  Some evaluations exceeded the {limit}s per-answer limit")

        print("\n" + "=" * 70)
        await self.client.aclose()


def main():
    parser = argparse.ArgumentParser(description="Benchmark the completion service")
    parser.add_argument(
        "--iterations",
        type=int,
        default=5,
        help="Number of iterations per task (default: 5)"
    )
    parser.add_argument(
        "--questions",
        type=int,
        default=5,
        help="Questions requested in the MCQ prompt (default: 5)"
    )

    args = parser.parse_args()

    if not settings.llm_configured:
        print("❌ Error: LLM_API_KEY not set in .env")
        sys.exit(1)

    benchmark = LLMBenchmark()
    asyncio.run(benchmark.run(args.iterations, args.questions))


if __name__ == "__main__":
    main()
