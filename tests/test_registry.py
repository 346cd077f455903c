"""
Tests for the installer registry.
"""

import pytest

from dotstrap.core.models.platform import Platform
from dotstrap.core.models.task import InstallerTask
from dotstrap.core.services.installers.registry import installers_for, task_classes

ORDER = ["unzip", "jq", "fzf", "fd", "bat", "starship", "lazygit", "neovim", "fish"]


class TestRegistry:
    @pytest.mark.parametrize("platform", list(Platform))
    def test_order(self, platform):
        assert [cls.tool for cls in task_classes(platform)] == ORDER

    @pytest.mark.parametrize("platform", list(Platform))
    def test_names_follow_tool_platform(self, platform):
        names = [cls.name for cls in task_classes(platform)]
        assert names == [f"{tool}-{platform.value}" for tool in ORDER]

    @pytest.mark.parametrize("platform", list(Platform))
    def test_every_task_declares_a_binary(self, platform):
        assert all(cls.binary for cls in task_classes(platform))

    def test_neovim_binary_is_nvim(self):
        assert {cls.binary for cls in task_classes(Platform.FEDORA) if cls.tool == "neovim"} == {"nvim"}

    def test_fresh_instances_each_call(self, make_ctx):
        ctx = make_ctx(Platform.FEDORA)
        first = installers_for(Platform.FEDORA, ctx)
        second = installers_for(Platform.FEDORA, ctx)
        assert all(isinstance(t, InstallerTask) for t in first)
        assert all(a is not b for a, b in zip(first, second))
        assert first[0].ctx is ctx

    def test_listing_does_not_mutate_registry(self):
        task_classes(Platform.MAC).clear()
        assert len(task_classes(Platform.MAC)) == len(ORDER)

    def test_step_names(self, ctx):
        tasks = installers_for(Platform.UBUNTU, ctx)
        assert tasks[2].step == "install-fzf-ubuntu"
