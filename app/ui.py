from __future__ import annotations

REFRESH_UI_HTML = """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>Session Refresher</title>
  <style>
    :root {
      --bg: #f5f7fb;
      --panel: #ffffff;
      --text: #162334;
      --muted: #5d6f84;
      --border: #d6dce5;
      --accent: #1653b5;
      --accent-soft: #dbe8ff;
      --ok: #0f7a42;
      --err: #b82727;
    }

    * {
      box-sizing: border-box;
    }

    body {
      margin: 0;
      padding: 1.25rem;
      background: radial-gradient(1000px 600px at 5% -20%, #dbe8ff 0%, var(--bg) 60%);
      color: var(--text);
      font-family: "IBM Plex Sans", "Segoe UI", Arial, sans-serif;
      line-height: 1.45;
    }

    .wrap {
      max-width: 720px;
      margin: 0 auto;
      display: grid;
      gap: 1rem;
    }

    .panel {
      background: var(--panel);
      border: 1px solid var(--border);
      border-radius: 12px;
      padding: 0.95rem;
      box-shadow: 0 1px 4px rgba(19, 43, 74, 0.06);
    }

    .panel h1 {
      margin: 0;
      font-size: 1.35rem;
    }

    .panel p {
      margin: 0.5rem 0 0.9rem;
      color: var(--muted);
    }

    .field {
      display: grid;
      gap: 0.35rem;
      margin-bottom: 0.65rem;
    }

    .field label {
      font-weight: 600;
      font-size: 0.9rem;
    }

    textarea,
    button {
      font: inherit;
    }

    textarea {
      width: 100%;
      min-height: 124px;
      border: 1px solid var(--border);
      border-radius: 8px;
      padding: 0.55rem 0.6rem;
      font-family: "IBM Plex Mono", Consolas, monospace;
      font-size: 0.85rem;
      resize: vertical;
    }

    .check {
      display: flex;
      align-items: center;
      gap: 0.45rem;
      margin-bottom: 0.8rem;
    }

    .actions {
      display: flex;
      gap: 0.55rem;
      flex-wrap: wrap;
    }

    button {
      border: 1px solid var(--border);
      border-radius: 8px;
      padding: 0.5rem 0.85rem;
      background: #fff;
      cursor: pointer;
    }

    button.primary {
      background: var(--accent);
      border-color: var(--accent);
      color: #fff;
    }

    button:disabled {
      opacity: 0.6;
      cursor: wait;
    }

    .status {
      margin-top: 0.8rem;
      font-size: 0.92rem;
    }

    .status.ok {
      color: var(--ok);
    }

    .status.err {
      color: var(--err);
    }

    .hidden {
      display: none;
    }

    .modal-backdrop {
      position: fixed;
      inset: 0;
      background: rgba(22, 35, 52, 0.45);
      display: flex;
      align-items: center;
      justify-content: center;
      padding: 1rem;
    }

    .modal {
      background: var(--panel);
      border-radius: 12px;
      max-width: 480px;
      width: 100%;
      padding: 1rem;
    }

    .profile {
      display: flex;
      gap: 0.8rem;
      align-items: center;
      margin-bottom: 0.8rem;
    }

    .profile img {
      width: 64px;
      height: 64px;
      border-radius: 50%;
      background: var(--accent-soft);
    }

    dl {
      display: grid;
      grid-template-columns: 120px 1fr;
      gap: 0.3rem 0.6rem;
      margin: 0 0 0.8rem;
    }

    dt {
      color: var(--muted);
    }

    dd {
      margin: 0;
    }
  </style>
</head>
<body>
  <div class="wrap">
    <section class="panel">
      <h1>Session Refresher</h1>
      <p>Paste your session cookie to obtain a refreshed one.</p>

      <div class="field">
        <label for="cookieInput">Cookie</label>
        <textarea id="cookieInput" autocomplete="off" spellcheck="false"></textarea>
      </div>

      <label class="check">
        <input id="includeUserInfo" type="checkbox">
        Also show my profile info and recent games
      </label>

      <div class="actions">
        <button id="refreshBtn" class="primary" type="button">Refresh Cookie</button>
      </div>
      <div id="statusLine" class="status"></div>
    </section>

    <section id="resultPanel" class="panel hidden">
      <div class="field">
        <label for="refreshedCookie">Refreshed Cookie</label>
        <textarea id="refreshedCookie" readonly></textarea>
      </div>
      <div class="actions">
        <button id="copyBtn" type="button">Copy</button>
        <button id="showInfoBtn" class="hidden" type="button">Show Profile Info</button>
      </div>
    </section>
  </div>

  <div id="userModal" class="modal-backdrop hidden">
    <div class="modal" role="dialog" aria-modal="true">
      <div class="profile">
        <img id="userAvatar" alt="">
        <div>
          <strong id="userName"></strong>
          <div id="userDisplayName"></div>
        </div>
      </div>
      <dl>
        <dt>User ID</dt><dd id="userId"></dd>
        <dt>Balance</dt><dd id="userBalance"></dd>
        <dt>Pending</dt><dd id="userPending"></dd>
        <dt>Summary</dt><dd id="userSummary"></dd>
        <dt>RAP</dt><dd id="userRap"></dd>
      </dl>
      <label>Recent Games</label>
      <ul id="gameList"></ul>
      <div class="actions">
        <button id="closeModalBtn" type="button">Close</button>
      </div>
    </div>
  </div>

  <script>
    (function () {
      const cookieEl = document.getElementById("cookieInput");
      const includeEl = document.getElementById("includeUserInfo");
      const refreshBtn = document.getElementById("refreshBtn");
      const statusEl = document.getElementById("statusLine");
      const resultPanel = document.getElementById("resultPanel");
      const refreshedEl = document.getElementById("refreshedCookie");
      const copyBtn = document.getElementById("copyBtn");
      const showInfoBtn = document.getElementById("showInfoBtn");
      const modalEl = document.getElementById("userModal");
      const closeModalBtn = document.getElementById("closeModalBtn");

      let userData = null;
      let gameData = null;

      function setStatus(message, kind) {
        statusEl.textContent = message;
        statusEl.className = "status" + (kind ? " " + kind : "");
      }

      function pick(source, path) {
        return path.reduce(function (value, key) {
          return value && typeof value === "object" ? value[key] : undefined;
        }, source);
      }

      function setText(id, value) {
        document.getElementById(id).textContent = value === undefined || value === null ? "-" : String(value);
      }

      function renderModal() {
        const avatar = pick(userData, ["userAvatar"]);
        const avatarEl = document.getElementById("userAvatar");
        if (typeof avatar === "string" && avatar.startsWith("https://")) {
          avatarEl.src = avatar;
        } else {
          avatarEl.removeAttribute("src");
        }
        setText("userName", pick(userData, ["userSettings", "userName"]));
        setText("userDisplayName", pick(userData, ["userSettings", "displayName"]));
        setText("userId", pick(userData, ["userSettings", "userId"]));
        setText("userBalance", pick(userData, ["userTransactions", "Balance"]));
        setText("userPending", pick(userData, ["userTransactions", "Pending"]));
        setText("userSummary", pick(userData, ["userTransactions", "Summary"]));
        setText("userRap", pick(userData, ["Collectibles", "Limiteds", "Rap"]));

        const listEl = document.getElementById("gameList");
        listEl.replaceChildren();
        const games = pick(gameData, ["games"]);
        (Array.isArray(games) ? games : []).forEach(function (name) {
          const item = document.createElement("li");
          item.textContent = String(name);
          listEl.appendChild(item);
        });
        modalEl.classList.remove("hidden");
      }

      async function refreshCookie() {
        const cookie = cookieEl.value;
        if (!cookie.trim()) {
          setStatus("Please enter a valid cookie", "err");
          return;
        }

        const includeUserInfo = includeEl.checked;
        refreshBtn.disabled = true;
        userData = null;
        gameData = null;
        refreshedEl.value = "";
        resultPanel.classList.add("hidden");
        showInfoBtn.classList.add("hidden");
        setStatus("Refreshing...", "");

        try {
          const response = await fetch("/api/refresh-cookie", {
            method: "POST",
            headers: { "Content-Type": "application/json" },
            body: JSON.stringify({ useCookie: cookie, includeUserInfo: includeUserInfo })
          });
          if (!response.ok) {
            throw new Error("Failed to refresh cookie");
          }

          const data = await response.json();
          refreshedEl.value = data.cookie;
          resultPanel.classList.remove("hidden");
          setStatus("Cookie refreshed successfully!", "ok");

          if (includeUserInfo && data.userData) {
            userData = data.userData;
            gameData = data.gameData || null;
            showInfoBtn.classList.remove("hidden");
            renderModal();
          }
        } catch (error) {
          setStatus("Failed to refresh cookie. Please check your cookie and try again.", "err");
        } finally {
          refreshBtn.disabled = false;
        }
      }

      async function copyRefreshed() {
        if (!refreshedEl.value) {
          return;
        }
        try {
          await navigator.clipboard.writeText(refreshedEl.value);
          setStatus("Copied to clipboard!", "ok");
        } catch (error) {
          setStatus("Failed to copy to clipboard", "err");
        }
      }

      refreshBtn.addEventListener("click", refreshCookie);
      copyBtn.addEventListener("click", copyRefreshed);
      showInfoBtn.addEventListener("click", renderModal);
      closeModalBtn.addEventListener("click", function () {
        modalEl.classList.add("hidden");
      });
    })();
  </script>
</body>
</html>
"""
