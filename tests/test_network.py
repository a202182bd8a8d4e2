"""Tests for the dense network builder and its LightningModule."""

from __future__ import annotations

import pytest
import torch
from hydra.core.config_store import ConfigStore
from torch import nn

from color_accessibility.errors import ConfigurationError
from color_accessibility.models import (
    ColorAccessibilityNetwork,
    build_network,
    layer_name,
)
from color_accessibility.types import RegressionBatch


@pytest.fixture()
def batch() -> RegressionBatch:
    return {"inputs": torch.rand(8, 3), "targets": torch.rand(8, 2)}


# ---------------------------------------------------------------------------
# build_network
# ---------------------------------------------------------------------------


class TestBuildNetwork:
    def test_default_topology(self) -> None:
        net = build_network()
        linears = [m for m in net if isinstance(m, nn.Linear)]
        assert [(m.in_features, m.out_features) for m in linears] == [
            (3, 64),
            (64, 32),
            (32, 16),
            (16, 2),
        ]

    def test_relu_on_all_but_last(self) -> None:
        net = build_network()
        kinds = [type(m) for m in net]
        assert kinds == [
            nn.Linear, nn.ReLU,
            nn.Linear, nn.ReLU,
            nn.Linear, nn.ReLU,
            nn.Linear,
        ]

    def test_last_layer_is_linear(self) -> None:
        """Outputs are raw scores and may be negative."""
        net = build_network()
        with torch.no_grad():
            net.fully_connected_3.bias.fill_(-5.0)
            out = net(torch.zeros(1, 3))
        assert (out < 0).any()

    def test_stable_layer_names(self) -> None:
        a = build_network()
        b = build_network()
        assert list(a.state_dict()) == list(b.state_dict())
        assert [layer_name(i) for i in range(4)] == [
            "fully_connected_0",
            "fully_connected_1",
            "fully_connected_2",
            "fully_connected_3",
        ]
        assert "fully_connected_0.weight" in a.state_dict()

    @pytest.mark.parametrize(
        "sizes", [(), (64, 0, 16, 2), (64, -1, 16, 2), (64, 32.5, 16, 2), (True, 2)]
    )
    def test_invalid_sizes_raise(self, sizes: tuple) -> None:
        with pytest.raises(ConfigurationError):
            build_network(sizes)

    def test_out_features_mismatch_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            build_network((8, 3), out_features=2)

    def test_out_features_match(self) -> None:
        net = build_network((8, 2), out_features=2)
        assert net(torch.rand(1, 3)).shape == (1, 2)

    def test_forward_shape(self) -> None:
        assert build_network()(torch.rand(5, 3)).shape == (5, 2)


# ---------------------------------------------------------------------------
# ColorAccessibilityNetwork
# ---------------------------------------------------------------------------


class TestColorAccessibilityNetwork:
    def test_hparams(self) -> None:
        m = ColorAccessibilityNetwork()
        assert tuple(m.hparams["layer_sizes"]) == (64, 32, 16, 2)
        assert m.hparams["initial_learning_rate"] == 0.06
        assert m.hparams["decay_factor"] == 0.90
        assert m.hparams["decay_interval"] == 50

    def test_invalid_sizes_fail_at_construction(self) -> None:
        with pytest.raises(ConfigurationError):
            ColorAccessibilityNetwork(layer_sizes=(64, 0, 2))

    def test_output_width_must_be_two(self) -> None:
        with pytest.raises(ConfigurationError):
            ColorAccessibilityNetwork(layer_sizes=(8, 3))

    def test_compute_loss_is_batch_mse(self, batch: RegressionBatch) -> None:
        m = ColorAccessibilityNetwork()
        loss, predictions = m.compute_loss(batch)
        expected = ((predictions - batch["targets"]) ** 2).mean()
        assert loss.shape == ()
        assert loss.item() == pytest.approx(expected.item(), rel=1e-6)

    def test_configure_optimizers(self) -> None:
        m = ColorAccessibilityNetwork(initial_learning_rate=0.1)
        cfg = m.configure_optimizers()
        assert isinstance(cfg["optimizer"], torch.optim.SGD)
        assert cfg["optimizer"].param_groups[0]["lr"] == pytest.approx(0.1)
        assert cfg["lr_scheduler"]["interval"] == "step"

    def test_scheduler_decays_every_interval(self) -> None:
        m = ColorAccessibilityNetwork(decay_interval=3)
        cfg = m.configure_optimizers()
        optimizer, scheduler = cfg["optimizer"], cfg["lr_scheduler"]["scheduler"]
        for _ in range(3):
            optimizer.step()
            scheduler.step()
        assert optimizer.param_groups[0]["lr"] == pytest.approx(0.054)


# ---------------------------------------------------------------------------
# Hydra ConfigStore registration
# ---------------------------------------------------------------------------


class TestHydraRegistration:
    def test_network_registered(self) -> None:
        cs = ConfigStore.instance()
        names = [k.replace(".yaml", "") for k in cs.repo.get("model", {})]
        assert "network" in names, f"network not in ConfigStore model: {names}"

    def test_network_node_carries_constructor_defaults(self) -> None:
        node = ConfigStore.instance().repo["model"]["network.yaml"].node
        assert node._target_ == (
            "color_accessibility.models.network.ColorAccessibilityNetwork"
        )
        assert list(node.layer_sizes) == [64, 32, 16, 2]
        assert node.initial_learning_rate == 0.06
        assert node.decay_factor == 0.90
        assert node.decay_interval == 50

    def test_datamodule_registered(self) -> None:
        import color_accessibility.data  # noqa: F401

        cs = ConfigStore.instance()
        names = [k.replace(".yaml", "") for k in cs.repo.get("data", {})]
        assert "colors" in names, f"colors not in ConfigStore data: {names}"
