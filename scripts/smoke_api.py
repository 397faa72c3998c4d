import requests
import time

BASE_URL = "http://localhost:8000"


def post(path, payload):
    start_time = time.time()
    response = requests.post(f"{BASE_URL}{path}", json=payload, timeout=120)
    response.raise_for_status()
    print(f"✅ {path} (Took {time.time() - start_time:.2f}s)")
    return response.json()


def smoke_test():
    topic = "JavaScript closures"

    try:
        health = requests.get(f"{BASE_URL}/health", timeout=10).json()
        print(f"🔹 Health: {health}")
        if not health.get("llm_configured"):
            print("❌ LLM_API_KEY is not set on the server; generation routes will fail")
            return

        print(f"\n🚀 Multiple choice: {topic}")
        mcq = post("/generate-mcq", {"topic": topic, "numQuestions": 3, "difficulty": "medium"})
        for q in mcq["questions"]:
            print(f"  - {q['question'][:70]} [{q['correctAnswer']}]")

        print(f"\n🚀 Written questions: {topic}")
        written = post("/generate-written", {"topic": topic, "numQuestions": 2, "categories": "Scope, Memory"})
        questions = [q["question"] for q in written["questions"]]
        for q in written["questions"]:
            print(f"  - ({q['category']}) {q['question'][:70]}")

        print("\n🚀 Evaluation")
        answers = ["A closure keeps access to its outer scope after the outer function returns.", ""]
        evaluation = post("/evaluate-answers", {
            "questions": questions,
            "answers": answers[:len(questions)],
            "topic": topic,
        })
        print(f"  Overall score: {evaluation['overallScore']}")
        for item in evaluation["feedback"]:
            print(f"  - {item['score']}: {item['comments'][:70]}")

        print(f"\n🚀 Notes: {topic}")
        notes = post("/notes", {"subject": topic, "level": "beginner"})
        for section in notes["notes"]["sections"]:
            print(f"  - {section['title']}")

        print(f"\n🚀 Roadmap: {topic}")
        roadmap = post("/generate-roadmap", {"topic": topic, "timeframe": "2 weeks"})
        for section in roadmap["sections"]:
            print(f"  - {section['title']}")

    except requests.exceptions.ConnectionError:
        print("❌ Error: Could not connect to server. Is uvicorn running?")
    except requests.exceptions.HTTPError as e:
        print(f"❌ HTTP Error: {e}")
        print(e.response.text)


if __name__ == "__main__":
    smoke_test()
