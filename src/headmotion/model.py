# src/headmotion/model.py
import numpy as np
import torch
import torch.nn as nn

from headmotion.config import HIDDEN_SIZE, NUM_FEATURES


class HeadActivityLSTM(nn.Module):
    def __init__(self, input_size=NUM_FEATURES, hidden_size=HIDDEN_SIZE, num_classes=4):
        super(HeadActivityLSTM, self).__init__()
        self.hidden_size = hidden_size
        self.num_layers = 1

        # single recurrent layer; its (h, c) pair is carried between windows
        self.lstm = nn.LSTM(
            input_size=input_size,
            hidden_size=hidden_size,
            num_layers=self.num_layers,
            batch_first=True,
        )

        # classifier
        self.fc = nn.Linear(hidden_size, num_classes)

    def forward(self, x, state=None):
        # x: [batch_size, seq_length, input_size]
        if state is None:
            h0 = torch.zeros(self.num_layers, x.size(0), self.hidden_size).to(x.device)
            c0 = torch.zeros(self.num_layers, x.size(0), self.hidden_size).to(x.device)
            state = (h0, c0)

        out, (hn, cn) = self.lstm(x, state)  # out: [batch, seq_len, hidden]
        out = out[:, -1, :]                   # take last time step
        out = self.fc(out)                    # [batch, num_classes]
        return out, (hn, cn)


def pack_state(h, c):
    """Flatten an LSTM (h, c) pair into one vector: hidden first, then cell."""
    h = h.detach().cpu().reshape(-1).numpy()
    c = c.detach().cpu().reshape(-1).numpy()
    return np.concatenate([h, c]).astype(np.float32)


def unpack_state(vector, hidden_size=HIDDEN_SIZE, device="cpu"):
    """Inverse of pack_state for a single-layer, single-batch LSTM."""
    vector = np.asarray(vector, dtype=np.float32).reshape(-1)
    if vector.shape[0] != 2 * hidden_size:
        raise ValueError(
            f"Expected state vector of length {2 * hidden_size}, got {vector.shape[0]}"
        )
    h = torch.from_numpy(vector[:hidden_size].copy()).view(1, 1, hidden_size).to(device)
    c = torch.from_numpy(vector[hidden_size:].copy()).view(1, 1, hidden_size).to(device)
    return h, c
