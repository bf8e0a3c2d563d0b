"""Node.js side of the WhatsApp bridge (whatsapp-web.js).

Written to the bridge directory and run as a subprocess. It speaks one
JSON object per line: events on stdout, commands on stdin, and a
`result` line answering every command by `id`. Human-readable logs go
to stderr.
"""

BRIDGE_PACKAGE_JSON = """{
  "name": "jinoca-bridge",
  "private": true,
  "dependencies": {
    "whatsapp-web.js": "^1.26.0"
  }
}
"""

BRIDGE_SCRIPT = r"""
const readline = require('readline');
const { Client, MessageMedia } = require('whatsapp-web.js');

const emit = (obj) => process.stdout.write(JSON.stringify(obj) + '\n');
const log = (...args) => console.error('[bridge]', ...args);

const client = new Client({
    puppeteer: {
        headless: true,
        args: ['--no-sandbox', '--disable-setuid-sandbox', '--disable-dev-shm-usage', '--single-process', '--no-zygote'],
        executablePath: process.env.PUPPETEER_EXECUTABLE_PATH || undefined,
    },
});

client.on('qr', (qr) => emit({ type: 'qr', qr }));
client.on('ready', () => emit({ type: 'ready' }));
client.on('auth_failure', (message) => emit({ type: 'auth_failure', message: String(message) }));
client.on('disconnected', (reason) => emit({ type: 'disconnected', reason: String(reason) }));

client.on('message', (msg) => {
    emit({
        type: 'message',
        id: msg.id._serialized,
        from: msg.author || msg.from,
        chatId: msg.id.remote,
        body: msg.body || '',
        fromMe: !!msg.fromMe,
        timestamp: msg.timestamp || 0,
    });
});

function quoted(quotedId) {
    return quotedId ? { quotedMessageId: quotedId } : {};
}

const handlers = {
    async send_text(cmd) {
        await client.sendMessage(cmd.chatId, cmd.text, quoted(cmd.quotedId));
    },
    async send_image(cmd) {
        const media = new MessageMedia(cmd.mimeType || 'image/png', cmd.data);
        const options = { caption: cmd.caption || '', ...quoted(cmd.quotedId) };
        await client.sendMessage(cmd.chatId, media, options);
    },
    async presence(cmd) {
        const chat = await client.getChatById(cmd.chatId);
        if (cmd.state === 'composing') {
            await chat.sendStateTyping();
        } else {
            await chat.clearState();
        }
    },
    async history(cmd) {
        const chat = await client.getChatById(cmd.chatId);
        const msgs = await chat.fetchMessages({ limit: cmd.limit || 10 });
        return msgs.map((m) => ({
            id: m.id._serialized,
            body: m.body || '',
            fromMe: !!m.fromMe,
            timestamp: m.timestamp || 0,
        }));
    },
};

const rl = readline.createInterface({ input: process.stdin });
rl.on('line', async (line) => {
    let cmd;
    try {
        cmd = JSON.parse(line);
    } catch (err) {
        log('bad command line:', line);
        return;
    }
    const handler = handlers[cmd.cmd];
    if (!handler) {
        emit({ type: 'result', id: cmd.id, ok: false, error: 'unknown command ' + cmd.cmd });
        return;
    }
    try {
        const data = await handler(cmd);
        emit({ type: 'result', id: cmd.id, ok: true, data: data === undefined ? null : data });
    } catch (err) {
        emit({ type: 'result', id: cmd.id, ok: false, error: String(err && err.message || err) });
    }
});
rl.on('close', () => client.destroy().finally(() => process.exit(0)));

process.on('SIGTERM', () => client.destroy().finally(() => process.exit(0)));

client.initialize().catch((err) => {
    log('initialize failed:', err);
    emit({ type: 'fatal', error: String(err && err.message || err) });
    process.exit(1);
});
"""
