from __future__ import annotations

import logging

import pytest

from asset_optimizer.errors import ConfigurationError, TranscodeError
from asset_optimizer.models import STILL_REFERENCED
from asset_optimizer.optimizer import log_report, run_optimizer

from .conftest import (
    FAKE_WEBP,
    FailingEncoder,
    JPEG_SIGNATURE,
    RecordingEncoder,
    snapshot_tree,
    write_sized,
    write_text,
)


@pytest.fixture
def blog_cover(project):
    cover = write_sized(project / "public" / "images" / "blog" / "cover.png", 800_000)
    post = write_text(project / "content" / "post.md", "# Post\n\n![cover](/images/blog/cover.png)\n")
    return cover, post


def test_blog_cover_scenario(project, make_config, encoder, blog_cover):
    cover, post = blog_cover

    report = run_optimizer(make_config(threshold_bytes=500_000), encoder)

    webp = project / "public" / "images" / "blog" / "cover.webp"
    assert webp.read_bytes() == FAKE_WEBP
    assert encoder.calls[0][2] == 1400
    assert encoder.calls[0][3] == 80
    assert post.read_text(encoding="utf-8") == "# Post\n\n![cover](/images/blog/cover.webp)\n"
    assert not cover.exists()
    assert report.converted_count == 1
    assert report.files_updated_count == 1
    assert report.deleted_count == 1
    assert report.original_bytes == 800_000
    assert report.optimized_bytes == len(FAKE_WEBP)
    assert report.kept_originals == []


def test_readme_code_fence_is_rewritten_too(project, make_config, encoder, blog_cover):
    cover, post = blog_cover
    readme = write_text(
        project / "README.md",
        "```\ncp cover.png public/images/blog/cover.png\n```\n",
    )

    report = run_optimizer(make_config(threshold_bytes=500_000), encoder)

    assert "public/images/blog/cover.webp" in readme.read_text(encoding="utf-8")
    assert "public/images/blog/cover.png" not in readme.read_text(encoding="utf-8")
    assert report.files_updated_count == 2
    assert not cover.exists()


def test_second_run_is_a_no_op(project, make_config, blog_cover):
    write_sized(project / "public" / "images" / "docs" / "step.jpg", 900_000, JPEG_SIGNATURE)
    write_text(project / "src" / "page.tsx", "import s from '@/public/images/docs/step.jpg';\n")
    config = make_config(threshold_bytes=500_000, delete_original=False)

    first = RecordingEncoder()
    first_report = run_optimizer(config, first)
    after_first = snapshot_tree(project)

    second = RecordingEncoder()
    second_report = run_optimizer(config, second)

    assert len(first.calls) == 2
    assert first_report.files_updated_count == 2
    assert second.calls == []
    assert second_report.files_updated_count == 0
    assert snapshot_tree(project) == after_first


def test_dry_run_leaves_tree_untouched(project, make_config, encoder, blog_cover, caplog):
    write_sized(project / "public" / "images" / "media" / "hero.png", 600_000)
    before = snapshot_tree(project)

    with caplog.at_level(logging.INFO, logger="asset_optimizer"):
        report = run_optimizer(make_config(threshold_bytes=500_000, dry_run=True), encoder)

    assert snapshot_tree(project) == before
    assert encoder.calls == []
    assert report.converted_count == 2
    assert report.files_updated_count == 1
    assert report.deleted_count == 0
    assert report.optimized_bytes == 0
    assert report.would_delete == ["images/blog/cover.png", "images/media/hero.png"]
    assert report.kept_originals == []
    assert "[dry-run] images/blog/cover.png -> images/blog/cover.webp" in caplog.text
    assert "(max 1400w)" in caplog.text
    assert "(max 2000w)" in caplog.text


def test_dry_run_matches_live_candidates(project, make_config, blog_cover):
    write_sized(project / "public" / "images" / "hero.png", 700_000)
    write_sized(project / "public" / "images" / "hero_raw.png", 900_000)

    dry = RecordingEncoder()
    dry_report = run_optimizer(make_config(threshold_bytes=500_000, dry_run=True), dry)
    live = RecordingEncoder()
    live_report = run_optimizer(make_config(threshold_bytes=500_000), live)

    assert dry_report.converted_count == live_report.converted_count == 2
    assert [call[0].name for call in live.calls] == ["cover.png", "hero.png"]
    assert live_report.deleted_count == len(dry_report.would_delete)
    assert (project / "public" / "images" / "hero_raw.png").exists()


def test_keep_original(project, make_config, encoder, blog_cover, caplog):
    cover, post = blog_cover

    with caplog.at_level(logging.INFO, logger="asset_optimizer"):
        report = run_optimizer(make_config(threshold_bytes=500_000, delete_original=False), encoder)
        log_report(report, make_config(delete_original=False))

    assert cover.exists()
    assert "/images/blog/cover.webp" in post.read_text(encoding="utf-8")
    assert report.deleted_count == 0
    assert report.kept_originals == []
    assert "Kept originals: --keep-original" in caplog.text


def test_kept_originals_are_reported(make_config, caplog):
    from asset_optimizer.models import RunReport

    report = RunReport(converted_count=1, kept_originals=[("images/a.png", STILL_REFERENCED)])
    with caplog.at_level(logging.INFO, logger="asset_optimizer"):
        log_report(report, make_config())

    assert "Kept originals (still referenced):" in caplog.text
    assert "- images/a.png (still referenced)" in caplog.text


def test_nothing_to_do(project, make_config, encoder, caplog):
    write_sized(project / "public" / "images" / "tiny.png", 100)

    with caplog.at_level(logging.INFO, logger="asset_optimizer"):
        report = run_optimizer(make_config(), encoder)

    assert report.converted_count == 0
    assert encoder.calls == []
    assert "No images >= 500.0KB to optimize" in caplog.text


def test_missing_public_dir(tmp_path, make_config, encoder):
    with pytest.raises(ConfigurationError):
        run_optimizer(make_config(project_root=tmp_path / "empty"), encoder)


def test_transcode_failure_aborts_before_rewrites(project, make_config, blog_cover):
    cover, post = blog_cover
    before = post.read_text(encoding="utf-8")

    with pytest.raises(TranscodeError):
        run_optimizer(make_config(threshold_bytes=500_000), FailingEncoder())

    assert cover.exists()
    assert post.read_text(encoding="utf-8") == before


def test_png_and_jpg_sharing_a_stem_warns(project, make_config, encoder, caplog):
    write_sized(project / "public" / "images" / "hero.png", 900_000)
    write_sized(project / "public" / "images" / "hero.jpg", 800_000, JPEG_SIGNATURE)

    with caplog.at_level(logging.WARNING, logger="asset_optimizer"):
        report = run_optimizer(make_config(threshold_bytes=500_000), encoder)

    assert len(encoder.calls) == 1
    assert report.converted_count == 2
    assert "both map to" in caplog.text
