"""Shared builders for core tests."""

from loopbench.schemas import ModelConfig, TestCase

VALID_CODE = """export default function Nav() {
  return (
    <nav className="flex">
      <button onClick={() => alert('home')}>Home</button>
    </nav>
  );
}"""

MISMATCHED_CODE = """export default function Nav() {
  return (
    <nav className="flex">
      <button onClick={() => alert('home')}>Home</a>
    </nav>
  );
}"""

BROKEN_CODE = "export default function Nav() {\n  return (<nav>\n"


def make_models(*ids: str) -> list:
    return [ModelConfig(name=model_id.upper(), id=model_id) for model_id in ids]


def make_cases(count: int) -> list:
    return [TestCase(name=f"Case {i + 1}", prompt=f"Build component {i + 1}") for i in range(count)]
