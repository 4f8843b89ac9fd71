import unittest

from quest.prompts import EXAMPLES_END, EXAMPLES_START, build_context, compose_prompt
from quest.styles import DEFAULT_STYLE, STYLES, get_style, list_styles


class TestComposePrompt(unittest.TestCase):
    def test_opening_prompt(self):
        prompt = compose_prompt("Mitochondria make ATP", [], "cyberpunk")
        self.assertIn("Mitochondria make ATP", prompt)
        self.assertIn(get_style("cyberpunk").prompt_fragment, prompt)
        self.assertIn("Create an engaging first learning scenario", prompt)
        self.assertNotIn("Student's answer", prompt)
        self.assertIn('"medal": null', prompt)
        self.assertIn(EXAMPLES_START, prompt)
        self.assertIn(EXAMPLES_END, prompt)
        self.assertTrue(prompt.rstrip().endswith("Ensure your response is valid JSON"))

    def test_evaluation_prompt(self):
        prompt = compose_prompt("ctx", ["first", "second"], "historical", "third")
        self.assertIn("Student's answer: third", prompt)
        self.assertIn("Provide a detailed evaluation", prompt)
        self.assertIn("bronze|silver|gold", prompt)
        self.assertIn("Previous answers:\nfirst\nsecond", prompt)
        self.assertNotIn("Create an engaging first learning scenario", prompt)

    def test_deterministic(self):
        args = ("ctx", ["a"], "modern", "b")
        self.assertEqual(compose_prompt(*args), compose_prompt(*args))

    def test_accepts_descriptor(self):
        style = get_style("steampunk")
        self.assertEqual(compose_prompt("ctx", [], style), compose_prompt("ctx", [], "steampunk"))

    def test_unknown_style(self):
        with self.assertRaises(ValueError):
            compose_prompt("ctx", [], "noir")


class TestBuildContext(unittest.TestCase):
    def test_joins_pdf_and_notes(self):
        self.assertEqual(build_context("page one\n", "my notes"), "page one\n\nmy notes")

    def test_notes_only(self):
        self.assertEqual(build_context("", "Photosynthesis"), "\nPhotosynthesis")

    def test_blank_rejected(self):
        with self.assertRaises(ValueError):
            build_context("  ", None)


class TestStyles(unittest.TestCase):
    def test_catalog(self):
        ids = [s.id for s in list_styles()]
        self.assertEqual(
            ids, ["fantasy", "scifi", "modern", "apocalyptic", "cyberpunk", "steampunk", "historical"]
        )
        self.assertIn(DEFAULT_STYLE, ids)
        for s in STYLES:
            self.assertTrue(s.prompt_fragment)
            self.assertEqual(set(s.to_dict()), {"id", "name", "description"})

    def test_lookup_is_case_insensitive(self):
        self.assertEqual(get_style(" SciFi ").display_name, "Sci-Fi")


if __name__ == "__main__":
    unittest.main()
