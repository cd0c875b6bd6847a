from bookrecommender.prompts.templates import estimate_tokens, render_recommendation_prompt


def test_recommendation_prompt_lists_history():
    prompt = render_recommendation_prompt(
        [
            {"title": "Dune", "author": "Frank Herbert"},
            {"title": "Emma", "author": "Jane Austen"},
        ],
        count=5,
    )
    assert prompt["system"] == "You are a book recommendation engine."
    assert "Dune by Frank Herbert, Emma by Jane Austen" in prompt["user"]
    assert "Suggest 5 similar books" in prompt["user"]
    assert '"title": "Book Title"' in prompt["user"]
    assert "Output ONLY valid JSON" in prompt["user"]


def test_long_history_is_sent_in_full():
    history = [{"title": f"Book {i}", "author": f"Author {i}"} for i in range(600)]
    history.append({"title": "Guns, Germs, and Steel", "author": "Jared Diamond"})
    prompt = render_recommendation_prompt(history, count=3)

    for book in history:
        assert f"{book['title']} by {book['author']}" in prompt["user"]
    assert estimate_tokens(prompt["user"]) > 3000


def test_braces_in_titles_are_not_template_fields():
    prompt = render_recommendation_prompt([{"title": "{count}", "author": "Anon"}], count=2)
    assert "{count} by Anon" in prompt["user"]
